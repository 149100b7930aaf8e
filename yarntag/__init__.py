"""yarntag — adds localization line tags to Yarn dialogue scripts."""

__version__ = "1.0.0"
