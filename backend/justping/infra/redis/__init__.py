from .redis_token_blacklist import RedisTokenBlacklist

__all__ = ["RedisTokenBlacklist"]
