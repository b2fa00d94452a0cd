"""Adapters: handlers, the logging bridge and log stores."""
