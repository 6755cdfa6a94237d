from notifier.main import app

__all__ = ["app"]
