from .user_client import UserInfo, UserServiceClient, resolve_seller_hub

__all__ = ["UserInfo", "UserServiceClient", "resolve_seller_hub"]
