"""Process exit codes for the peridio CLI.

Input rejections use the sysexits ``EX_DATAERR`` value so wrapper scripts can
tell a malformed identifier apart from an API or network failure.
"""

EXIT_SUCCESS = 0
EXIT_API_ERROR = 1
EXIT_USAGE = 2
EXIT_DATA_ERROR = 65
EXIT_UNAVAILABLE = 69
EXIT_CONFIG_ERROR = 78
