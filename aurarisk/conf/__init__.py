"""Bundled YAML defaults read by ``aurarisk.data.config.load_default_config``."""
