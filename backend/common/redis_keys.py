def chat_rate_window_key(room_code: str, sender: str) -> str:
    return f"room:{room_code}:chat_rate:{sender}"


def chat_cooldown_key(room_code: str, sender: str) -> str:
    return f"room:{room_code}:chat_cooldown:{sender}"
