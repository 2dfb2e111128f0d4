"""Budget ledger engine services."""
