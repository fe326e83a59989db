# logsanitizer/engine/__init__.py

"""Engine package providing the address matcher, sanitizer and auditor.

The matcher is the precise, pure part of the system; the auditor exposes
the same grammars through Presidio recognizers for reporting.
"""
