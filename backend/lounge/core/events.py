# WebSocket event type definitions

# client -> server
REGISTER = "register"
SEND_MESSAGE = "send-message"
TYPING = "typing"
STOP_TYPING = "stop-typing"

# server -> originating client only
REGISTER_SUCCESS = "register-success"
REGISTER_FAILED = "register-failed"
ERROR = "error"

# server -> every subscriber
MESSAGE_NEW = "new-message"
USER_JOINED = "user-joined"
USER_LEFT = "user-left"
USER_NAME_CHANGED = "user-name-changed"

# server -> every subscriber except the sender
USER_TYPING = "user-typing"
USER_STOP_TYPING = "user-stop-typing"
