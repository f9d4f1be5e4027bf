"""Port interfaces (Protocols) between the core and its adapters."""
