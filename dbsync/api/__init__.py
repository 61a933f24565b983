"""HTTP interface"""

from dbsync.api.app import create_app

__all__ = ["create_app"]
