class StoreError(RuntimeError):
    """Raised by repositories when the backing table store cannot serve a request."""
