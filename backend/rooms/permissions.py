class PermissionService:
    """
    Admin-only rules, evaluated against live participant records.

    ``None`` stands for a connection with no participant in the room.
    """

    @staticmethod
    def is_admin(participant) -> bool:
        return participant is not None and participant.is_admin

    @staticmethod
    def can_control_playback(participant) -> bool:
        return PermissionService.is_admin(participant)

    @staticmethod
    def can_moderate(participant) -> bool:
        return PermissionService.is_admin(participant)

    @staticmethod
    def can_be_kicked(participant) -> bool:
        return participant is not None and not participant.is_admin
