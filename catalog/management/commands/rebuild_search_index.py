"""
重建商品搜索索引命令。
"""
from django.core.management.base import BaseCommand, CommandError

from catalog.application import RebuildSearchIndexCommand
from catalog.infrastructure.factory import CatalogInfrastructureFactory


class Command(BaseCommand):
    help = "为全部商品重建搜索索引"

    def add_arguments(self, parser):
        parser.add_argument("--keep-existing", action="store_true", help="不清空已有索引，只覆盖现有商品")

    def handle(self, *args, **options):
        service = CatalogInfrastructureFactory().create_search_service()
        result = service.rebuild_search_index(RebuildSearchIndexCommand(clear_existing=not options["keep_existing"]))
        if result.is_failure:
            raise CommandError(result.error.message)
        summary = result.value
        self.stdout.write(self.style.SUCCESS(
            f"已索引{summary.products_indexed}个商品，耗时{summary.duration_ms}ms"
        ))
