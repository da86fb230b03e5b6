class RefreshCountdown:
    """Seconds left until the next automatic refetch."""

    def __init__(self, interval: int = 300):
        self.interval = interval
        self.remaining = interval

    def tick(self) -> bool:
        """Advance one second. Returns True when the countdown expired and was reset."""
        if self.remaining <= 1:
            self.remaining = self.interval
            return True
        self.remaining -= 1
        return False

    def reset(self) -> None:
        self.remaining = self.interval

    def display(self) -> str:
        minutes, seconds = divmod(self.remaining, 60)
        return f"{minutes}:{seconds:02d}"
