"""Records, shaping, localization, fonts and configuration."""
