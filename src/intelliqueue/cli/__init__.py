"""IntelliQueue command line interface."""
