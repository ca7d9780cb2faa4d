from creatorpulse.mail.sender import EmailSender, ResendEmailSender

__all__ = ["EmailSender", "ResendEmailSender"]
