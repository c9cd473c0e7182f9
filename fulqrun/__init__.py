"""FulQrun MEDDPICC qualification service."""
