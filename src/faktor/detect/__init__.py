"""Payment identifier validators and card BIN detection."""
