"""Row processing services: template, error handlers, locator and runner."""
