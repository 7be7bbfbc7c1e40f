"""
发件箱应用层。
"""
from outbox.application.outbox_processor import OutboxProcessor, ProcessingResult, retry_delay

__all__ = ['OutboxProcessor', 'ProcessingResult', 'retry_delay']
