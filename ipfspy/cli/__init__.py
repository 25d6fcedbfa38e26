"""ipfspy command line interface."""
