"""Platform identifiers, errors and host detection."""
