"""Starter .leakscan.toml template written by ``leakscan init``."""

DEFAULT_TOML = """\
# leakscan configuration
version = "1.0"

[scan]
max_concurrency = 4       # repositories scanned in parallel
per_page = 100            # repositories requested per listing page
max_page_failures = 3     # consecutive diff-page errors before giving up
leak_exit_code = 1
clone_depth = 0           # 0 = full history

[output]
format = "terminal"       # terminal | json | sarif | csv
redact = false
show_summary = true

[rules]
use_builtin = true
# enable = ["mailgun-private-api-token"]   # empty = all enabled
# disable = ["generic-api-key"]

[allowlist]
description = "global allowlist"
# regexes = ["EXAMPLE", "dummy"]
# paths = ["^vendor/", "^testdata/"]
# files = ["(?i)\\\\.lock$"]
# commits = ["0123456789abcdef0123456789abcdef01234567"]

[logging]
level = "INFO"            # DEBUG | INFO | WARNING | ERROR
format = "rich"           # rich | plain | json

# Rules can also be defined inline:
# [[rule]]
# id = "internal-token"
# description = "Internal service token"
# regex = '''itk_([A-Za-z0-9]{32})'''
# report_group = 1
# entropies = [{ group = 1, min = 3.5, max = 8.0 }]
# tags = ["internal"]
"""
