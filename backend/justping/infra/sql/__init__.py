from .sql_token_blacklist import SQLTokenBlacklist

__all__ = ["SQLTokenBlacklist"]
