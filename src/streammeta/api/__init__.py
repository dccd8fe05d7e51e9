"""HTTP API for streammeta."""
