# Inbound commands
JOIN_ROOM = "join-room"
LEAVE_ROOM = "leave-room"
PLAY_VIDEO = "play-video"
PAUSE_VIDEO = "pause-video"
SEEK_VIDEO = "seek-video"
CHANGE_VIDEO = "change-video"
CHAT_MESSAGE = "chat-message"
SYNC_REQUEST = "sync-request"
KICK_USER = "kick-user"
CLOSE_ROOM = "close-room"

# Outbound notifications
ROOM_SNAPSHOT = "room-snapshot"
PARTICIPANT_JOINED = "participant-joined"
PARTICIPANT_LEFT = "participant-left"
USER_LEFT = "user-left"
USER_KICKED = "user-kicked"
VIDEO_PLAY = "video-play"
VIDEO_PAUSE = "video-pause"
VIDEO_SEEK = "video-seek"
VIDEO_CHANGED = "video-changed"
SYNC_STATE = "sync-state"
ROOM_CLOSED = "room-closed"
ERROR = "error"
