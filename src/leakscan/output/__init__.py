"""Report writers — terminal, JSON, SARIF, CSV."""
