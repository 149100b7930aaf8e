"""Script compiler: validates node bodies and builds the string info table."""
