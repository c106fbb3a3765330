"""Web service exposing a validated, externally configured GitHub URL."""
