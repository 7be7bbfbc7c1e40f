"""
发件箱处理命令。
默认持续运行，按OUTBOX_SETTINGS配置的间隔处理消息并定期清理。
"""
import time

from django.conf import settings
from django.core.management.base import BaseCommand
from loguru import logger

from core.infrastructure.transaction import DjangoTransactionManager
from outbox.application import OutboxProcessor
from outbox.infrastructure.repositories import DjangoOutboxMessageRepository


class Command(BaseCommand):
    help = "处理发件箱中的领域事件"

    def add_arguments(self, parser):
        parser.add_argument("--once", action="store_true", help="只处理一批消息后退出")
        parser.add_argument("--cleanup", action="store_true", help="只清理已处理的旧消息后退出")

    def handle(self, *args, **options):
        outbox_settings = getattr(settings, "OUTBOX_SETTINGS", {})
        processor = OutboxProcessor.from_settings(DjangoOutboxMessageRepository(), DjangoTransactionManager())
        days_to_keep = outbox_settings.get("DAYS_TO_KEEP_PROCESSED_MESSAGES", 7)

        if options["cleanup"]:
            deleted = processor.cleanup(days_to_keep)
            self.stdout.write(self.style.SUCCESS(f"已清理{deleted}条消息"))
            return

        if options["once"]:
            result = processor.process_pending()
            self.stdout.write(self.style.SUCCESS(f"成功{result.processed}条，失败{result.failed}条"))
            return

        interval = outbox_settings.get("PROCESSING_INTERVAL_MILLISECONDS", 5000) / 1000
        cleanup_interval = outbox_settings.get("CLEANUP_INTERVAL_HOURS", 24) * 3600
        last_cleanup = None
        logger.info("发件箱处理服务已启动")
        try:
            while True:
                now = time.monotonic()
                if last_cleanup is None or now - last_cleanup >= cleanup_interval:
                    processor.cleanup(days_to_keep)
                    last_cleanup = now
                try:
                    processor.process_pending()
                except Exception as e:
                    logger.error(f"处理发件箱消息出错: {e}")
                time.sleep(interval)
        except KeyboardInterrupt:
            logger.info("发件箱处理服务已停止")
