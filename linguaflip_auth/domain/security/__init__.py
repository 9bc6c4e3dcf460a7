from .audit import AuditEntry, SecurityAuditor, mask_email, mask_ip_address, mask_token

__all__ = ["AuditEntry", "SecurityAuditor", "mask_email", "mask_ip_address", "mask_token"]
