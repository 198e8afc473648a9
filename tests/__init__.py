"""fieldstate test suite.

Test organization:
- unit/: validators, validator sets, FieldState, SynchronizedField, errors,
  logging and settings
- integration/: the example log-in form driven end to end
"""
