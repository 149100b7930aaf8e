"""Exception types raised by the yarntag loader, compiler and tagger."""


class YarnTagError(Exception):
    """Base class for all yarntag errors."""


class UnrecognizedExtensionError(YarnTagError):
    """One or more input files have an extension outside the allowed set."""

    def __init__(self, files, allowed=None):
        self.files = list(files)
        self.allowed = list(allowed or [])
        msg = "Unrecognized file extension: " + ", ".join(self.files)
        if self.allowed:
            msg += f" (allowed: {', '.join(self.allowed)})"
        super().__init__(msg)


class UnsupportedFormatError(YarnTagError):
    """The file's format is recognized but cannot be tagged or serialized."""


class NodeParseError(YarnTagError):
    """Raw file text could not be split into nodes."""


class CompileError(YarnTagError):
    """A script failed to compile."""

    def __init__(self, message, file_name="", node=None, line_number=None):
        self.file_name = file_name
        self.node = node
        self.line_number = line_number
        location = file_name or "<string>"
        if node is not None:
            location += f", node '{node}'"
        if line_number is not None:
            location += f", line {line_number}"
        super().__init__(f"{location}: {message}")


class LineIndexOutOfRangeError(YarnTagError, IndexError):
    """A compiler line number does not exist in the re-extracted node body."""


class NodeNotFoundError(YarnTagError, KeyError):
    """A compiler node title does not exist in the re-extracted node list."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""
