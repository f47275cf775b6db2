from pydantic import BaseModel

class VideoTokenRequest(BaseModel):
    appointment_id: int

class VideoTokenResponse(BaseModel):
    token: str
    room_name: str
    identity: str
