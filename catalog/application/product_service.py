"""
商品应用服务。
定义商品相关的应用层服务，处理命令和查询，协调领域层和基础设施层。
"""
import os
import uuid
from typing import Any, Dict, List, Optional

from django.conf import settings
from loguru import logger

from core.application.pagination import DataTableRequest, DataTableResult, PaginatedResult
from core.application.services import ApplicationService, service_operation
from core.domain import (
    DuplicateEntityException,
    EntityNotFoundException,
    Money,
    Slug,
    ValidationException,
)
from core.infrastructure.cache import CacheService
from core.infrastructure.storage import FileStorageService
from core.infrastructure.transaction import TransactionManager
from catalog.application.commands import (
    AddProductVariantCommand,
    ChangeProductStatusCommand,
    ChangeVariantStatusCommand,
    CreateProductCommand,
    DeleteProductCommand,
    DeleteProductVariantCommand,
    RemoveProductImageCommand,
    ReorderProductImagesCommand,
    SetDefaultProductImageCommand,
    UpdateProductCommand,
    UpdateProductVariantCommand,
    UpdateVariantStockCommand,
    UploadProductImageCommand,
)
from catalog.application.dtos import ProductDTO, ProductImageDTO, ProductVariantDTO
from catalog.application.queries import ListProductsQuery
from catalog.domain import (
    Attribute,
    AttributeRepository,
    CategoryRepository,
    Product,
    ProductRepository,
)

STOCK_OPERATIONS = ("set", "add", "remove")


class ProductApplicationService(ApplicationService):
    """
    商品应用服务。
    处理商品、变体、库存和图片相关的应用层逻辑。
    """

    def __init__(
        self,
        product_repository: ProductRepository,
        category_repository: CategoryRepository,
        attribute_repository: AttributeRepository,
        storage_service: FileStorageService,
        transaction_manager: TransactionManager,
        cache_service: Optional[CacheService] = None
    ):
        """
        初始化商品应用服务。

        Args:
            product_repository: 商品仓储
            category_repository: 分类仓储
            attribute_repository: 属性仓储
            storage_service: 图片对象存储
            transaction_manager: 事务管理器
            cache_service: 缓存服务
        """
        super().__init__(transaction_manager, cache_service)
        self.product_repository = product_repository
        self.category_repository = category_repository
        self.attribute_repository = attribute_repository
        self.storage_service = storage_service
        options = settings.CATALOG_SETTINGS
        self.cache_timeout = options.get("CACHE_TIMEOUT", 3600)
        self.image_prefix = options.get("IMAGE_PREFIX", "products")
        self.max_image_size = options.get("MAX_IMAGE_SIZE", 5 * 1024 * 1024)
        self.allowed_image_types = options.get("ALLOWED_IMAGE_TYPES", [])

    # ==================== 内部方法 ====================

    def _to_dto(self, product: Product) -> ProductDTO:
        return ProductDTO.from_domain(product, self.storage_service.get_url)

    def _get_product(self, product_id) -> Product:
        product = self.product_repository.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundException("Product", product_id)
        return product

    def _get_product_by_variant(self, variant_id) -> Product:
        product = self.product_repository.get_by_variant_id(variant_id)
        if product is None:
            raise EntityNotFoundException("ProductVariant", variant_id)
        return product

    def _ensure_unique(self, slug: str, sku: Optional[str], exclude_id=None) -> None:
        normalized = Slug.normalize(slug)
        if self.product_repository.slug_exists(normalized, exclude_id):
            raise DuplicateEntityException("Product", "slug", normalized)
        if sku and self.product_repository.sku_exists(sku.strip(), exclude_id):
            raise DuplicateEntityException("Product", "sku", sku.strip())

    def _ensure_unique_variant_sku(self, sku: Optional[str], exclude_variant_id=None) -> None:
        if sku and self.product_repository.variant_sku_exists(sku.strip(), exclude_variant_id):
            raise DuplicateEntityException("ProductVariant", "sku", sku.strip())

    def _apply_categories(self, product: Product, category_ids: List[Any]) -> None:
        for category_id in category_ids:
            if self.category_repository.get_by_id(category_id) is None:
                raise EntityNotFoundException("Category", category_id)
        product.set_categories([uuid.UUID(str(c)) for c in category_ids])

    def _resolve_attributes(self, values: Dict[str, Any]) -> List[tuple]:
        """把属性ID到值的映射解析为(属性, 值)列表，属性不存在时抛出异常"""
        if not values:
            return []
        found: Dict[str, Attribute] = self.attribute_repository.get_by_ids(list(values.keys()))
        pairs = []
        for attribute_id, value in values.items():
            attribute = found.get(str(attribute_id))
            if attribute is None:
                raise EntityNotFoundException("Attribute", attribute_id)
            pairs.append((attribute, value))
        return pairs

    @staticmethod
    def _price(amount, currency: str = "USD") -> Optional[Money]:
        return Money(amount, currency) if amount is not None else None

    # ==================== 商品命令 ====================

    @service_operation("创建商品")
    def create_product(self, command: CreateProductCommand) -> ProductDTO:
        """
        创建商品。

        Args:
            command: 创建商品命令

        Returns:
            创建的商品DTO
        """
        with self.transaction_manager.start():
            self._ensure_unique(command.slug, command.sku)
            product = Product.create(
                name=command.name,
                slug=command.slug,
                base_price=Money(command.base_price, command.currency),
                description=command.description,
                sku=command.sku,
                is_active=command.is_active,
            )
            for key, value in (command.metadata or {}).items():
                product.set_metadata(key, value)
            self._apply_categories(product, command.category_ids or [])
            for attribute, value in self._resolve_attributes(command.attributes):
                product.set_attribute(attribute, value)
            self.product_repository.save(product)
            logger.info(f"商品已创建: {product.id} {product.slug}")
            return self._to_dto(product)

    @service_operation("更新商品")
    def update_product(self, command: UpdateProductCommand) -> ProductDTO:
        with self.transaction_manager.start():
            product = self._get_product(command.id)
            self._ensure_unique(command.slug, command.sku, exclude_id=product.id)
            product.update(
                name=command.name,
                slug=command.slug,
                base_price=Money(command.base_price, command.currency),
                description=command.description,
                sku=command.sku,
            )
            if command.category_ids is not None:
                self._apply_categories(product, command.category_ids)
            if command.attributes is not None:
                product.attributes.clear()
                for attribute, value in self._resolve_attributes(command.attributes):
                    product.set_attribute(attribute, value)
            self.product_repository.save(product)
            return self._to_dto(product)

    @service_operation("变更商品状态")
    def change_status(self, command: ChangeProductStatusCommand) -> ProductDTO:
        with self.transaction_manager.start():
            product = self._get_product(command.id)
            if command.is_active:
                product.activate()
            else:
                product.deactivate()
            if product.domain_events:
                self.product_repository.save(product)
            return self._to_dto(product)

    @service_operation("删除商品")
    def delete_product(self, command: DeleteProductCommand) -> None:
        """
        删除商品及其变体，事务提交后删除存储中的图片。
        """
        with self.transaction_manager.start():
            product = self._get_product(command.id)
            image_keys = product.all_image_keys()
            product.mark_deleted()
            self.product_repository.delete(product)
            self.transaction_manager.on_commit(lambda: self._delete_files(image_keys))
            logger.info(f"商品已删除: {product.id}")

    def _delete_files(self, keys: List[str]) -> None:
        for key in keys:
            try:
                self.storage_service.delete_file(key)
            except Exception as e:
                logger.error(f"删除图片失败 {key}: {e}")

    # ==================== 变体命令 ====================

    @service_operation("添加商品变体")
    def add_variant(self, command: AddProductVariantCommand) -> ProductVariantDTO:
        with self.transaction_manager.start():
            product = self._get_product(command.product_id)
            self._ensure_unique_variant_sku(command.sku)
            variant = product.add_variant(
                sku=command.sku,
                price=self._price(command.price, product.base_price.currency),
                stock_quantity=command.stock_quantity,
                is_active=command.is_active,
                metadata=command.metadata,
                attributes=self._resolve_attributes(command.attributes),
            )
            self.product_repository.save(product)
            return ProductVariantDTO(variant, product, self.storage_service.get_url)

    @service_operation("更新商品变体")
    def update_variant(self, command: UpdateProductVariantCommand) -> ProductVariantDTO:
        with self.transaction_manager.start():
            product = self._get_product_by_variant(command.variant_id)
            self._ensure_unique_variant_sku(command.sku, exclude_variant_id=command.variant_id)
            variant = product.update_variant(
                command.variant_id,
                command.sku,
                self._price(command.price, product.base_price.currency),
                command.metadata,
            )
            if command.attributes is not None:
                variant.attributes.clear()
                for attribute, value in self._resolve_attributes(command.attributes):
                    product.set_variant_attribute(variant.id, attribute, value)
            self.product_repository.save(product)
            return ProductVariantDTO(variant, product, self.storage_service.get_url)

    @service_operation("变更变体状态")
    def change_variant_status(self, command: ChangeVariantStatusCommand) -> ProductVariantDTO:
        with self.transaction_manager.start():
            product = self._get_product_by_variant(command.variant_id)
            if command.is_active:
                product.activate_variant(command.variant_id)
            else:
                product.deactivate_variant(command.variant_id)
            if product.domain_events:
                self.product_repository.save(product)
            variant = product.get_variant(command.variant_id)
            return ProductVariantDTO(variant, product, self.storage_service.get_url)

    @service_operation("更新变体库存")
    def update_variant_stock(self, command: UpdateVariantStockCommand) -> ProductVariantDTO:
        """
        更新变体库存。

        Raises:
            ValidationException: 未知的库存操作
            InsufficientStockException: 扣减数量超过现有库存
        """
        if command.operation not in STOCK_OPERATIONS:
            raise ValidationException("operation", f"未知的库存操作: {command.operation}")
        with self.transaction_manager.start():
            product = self._get_product_by_variant(command.variant_id)
            if command.operation == "set":
                product.set_variant_stock(command.variant_id, command.quantity)
            elif command.operation == "add":
                product.add_variant_stock(command.variant_id, command.quantity)
            else:
                product.remove_variant_stock(command.variant_id, command.quantity)
            self.product_repository.save(product)
            variant = product.get_variant(command.variant_id)
            return ProductVariantDTO(variant, product, self.storage_service.get_url)

    @service_operation("删除商品变体")
    def delete_variant(self, command: DeleteProductVariantCommand) -> None:
        with self.transaction_manager.start():
            product = self._get_product_by_variant(command.variant_id)
            variant = product.remove_variant(command.variant_id)
            image_keys = [i.image_key for i in variant.images]
            self.product_repository.save(product)
            self.transaction_manager.on_commit(lambda: self._delete_files(image_keys))

    # ==================== 图片命令 ====================

    def _image_key(self, product_id, filename: str) -> str:
        ext = os.path.splitext(filename or "")[1].lower()
        return f"{self.image_prefix}/{product_id}/{uuid.uuid4()}{ext}"

    def _validate_image(self, command: UploadProductImageCommand) -> None:
        if self.allowed_image_types and command.content_type not in self.allowed_image_types:
            raise ValidationException("file", f"不支持的图片类型: {command.content_type}")
        if command.size and command.size > self.max_image_size:
            raise ValidationException("file", "图片大小超过限制")

    @service_operation("上传商品图片")
    def upload_image(self, command: UploadProductImageCommand) -> ProductImageDTO:
        """
        上传商品图片并加入商品或变体的图片集合。
        保存失败时删除已上传的对象。

        Args:
            command: 上传商品图片命令

        Returns:
            新图片的DTO
        """
        self._validate_image(command)
        product = self._get_product(command.product_id)
        if command.variant_id:
            product.get_variant(command.variant_id)

        key = self._image_key(product.id, command.filename)
        url = self.storage_service.upload_file(
            key, command.content, command.content_type, {"product_id": str(product.id)}
        )
        try:
            with self.transaction_manager.start():
                if command.variant_id:
                    image = product.add_variant_image(
                        command.variant_id, key, command.alt_text, command.is_default, command.display_order
                    )
                else:
                    image = product.add_image(key, command.alt_text, command.is_default, command.display_order)
                self.product_repository.save(product)
        except Exception:
            self._delete_files([key])
            raise
        return ProductImageDTO(image, url)

    @service_operation("删除商品图片")
    def remove_image(self, command: RemoveProductImageCommand) -> None:
        with self.transaction_manager.start():
            product = self._get_product(command.product_id)
            if command.variant_id:
                product.remove_variant_image(command.variant_id, command.image_key)
            else:
                product.remove_image(command.image_key)
            self.product_repository.save(product)
            self.transaction_manager.on_commit(lambda: self._delete_files([command.image_key]))

    @service_operation("设置默认商品图片")
    def set_default_image(self, command: SetDefaultProductImageCommand) -> ProductDTO:
        with self.transaction_manager.start():
            product = self._get_product(command.product_id)
            product.set_default_image(command.image_key)
            self.product_repository.save(product)
            return self._to_dto(product)

    @service_operation("调整商品图片顺序")
    def reorder_images(self, command: ReorderProductImagesCommand) -> ProductDTO:
        """
        按给定序号调整商品图片的显示顺序，未列出的图片保持原序号。

        Raises:
            EntityNotFoundException: 映射中包含不属于该商品的图片
            ValidationException: 序号为负数
        """
        if any(order < 0 for order in command.orders.values()):
            raise ValidationException("display_order", "显示顺序不能为负数")
        with self.transaction_manager.start():
            product = self._get_product(command.product_id)
            for image_key in command.orders:
                if product.images.find(image_key) is None:
                    raise EntityNotFoundException("ProductImage", image_key)
            product.reorder_images(command.orders)
            self.product_repository.save(product)
            return self._to_dto(product)

    # ==================== 查询处理方法 ====================

    @service_operation("获取商品")
    def get_product(self, product_id) -> ProductDTO:
        def load():
            product = self.product_repository.get_by_id(product_id)
            return self._to_dto(product) if product else None

        dto = self._cached(f"product:{product_id}", load, self.cache_timeout)
        if dto is None:
            raise EntityNotFoundException("Product", product_id)
        return dto

    @service_operation("按别名获取商品")
    def get_product_by_slug(self, slug: str) -> ProductDTO:
        def load():
            product = self.product_repository.get_by_slug(slug)
            return self._to_dto(product) if product else None

        dto = self._cached(f"products:slug:{slug}", load, self.cache_timeout)
        if dto is None:
            raise EntityNotFoundException("Product", slug)
        return dto

    @service_operation("获取商品列表")
    def list_products(self, query: ListProductsQuery) -> PaginatedResult:
        """
        按条件分页获取商品。

        Args:
            query: 商品列表查询

        Returns:
            分页结果
        """
        def load():
            products, total = self.product_repository.search(
                search=query.search,
                category_id=query.category_id,
                min_price=query.min_price,
                max_price=query.max_price,
                active_only=query.active_only,
                in_stock_only=query.in_stock_only,
                sort_by=query.sort_by,
                sort_desc=query.sort_desc,
                page=query.page,
                page_size=query.page_size,
            )
            return PaginatedResult([self._to_dto(p) for p in products], total, query.page, query.page_size)

        return self._cached(query.cache_key(), load, self.cache_timeout)

    @service_operation("商品数据表查询")
    def get_datatable(self, request: DataTableRequest) -> DataTableResult:
        products, total, filtered = self.product_repository.datatable(request)
        return DataTableResult(request.draw, total, filtered, [self._to_dto(p).to_dict() for p in products])

    @service_operation("获取商品变体")
    def get_product_variants(self, product_id) -> List[ProductVariantDTO]:
        product = self._get_product(product_id)
        return [ProductVariantDTO(v, product, self.storage_service.get_url) for v in product.variants]

    @service_operation("获取变体")
    def get_variant(self, variant_id) -> ProductVariantDTO:
        product = self._get_product_by_variant(variant_id)
        return ProductVariantDTO(product.get_variant(variant_id), product, self.storage_service.get_url)

    @service_operation("按SKU获取变体")
    def get_variant_by_sku(self, sku: str) -> ProductVariantDTO:
        product = self.product_repository.get_by_variant_sku(sku)
        if product is None:
            raise EntityNotFoundException("ProductVariant", sku)
        variant = next(v for v in product.variants if v.sku == sku)
        return ProductVariantDTO(variant, product, self.storage_service.get_url)
