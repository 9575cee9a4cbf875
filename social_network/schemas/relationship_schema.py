from pydantic import BaseModel
from enum import Enum

class RelationshipStatus(str, Enum):
    NONE = "none"
    FOLLOWING = "following"
    FOLLOWED_BY = "followed_by"
    FRIENDS = "friends"
    SELF = "self"

class UserFriendRequest(BaseModel):
    """Body of the friend/follower mutations: the counterparty's id"""
    id: int

class UserRelationship(BaseModel):
    viewer_id: int
    target_id: int
    status: RelationshipStatus
