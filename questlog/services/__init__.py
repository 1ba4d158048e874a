"""Domain services: the session ledger and the helpers around it."""
