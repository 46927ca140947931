"""Shadow pass — mechanical statement extraction from raw model responses.

Modules:
  statement_types — inclusion patterns and priorities (pass 1)
  exclusion_rules — hard/soft disqualifiers (pass 2)
  extractor       — two-pass extraction over batch responses
  delta           — statements validated by the shadow pass but absent from the claims
"""
