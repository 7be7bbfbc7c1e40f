"""
商品目录API视图。
提供分类、属性、商品和变体的RESTful API接口，处理HTTP请求并调用应用服务。
"""
import logging

from core.application.pagination import DataTableRequest
from core.infrastructure.api_view import ApiBaseView
from core.infrastructure.permissions import IsAdminOrManager, IsStaffOrReadOnly, is_staff
from catalog.application import (
    AddProductVariantCommand,
    ChangeCategoryStatusCommand,
    ChangeProductStatusCommand,
    ChangeVariantStatusCommand,
    CreateAttributeCommand,
    CreateCategoryCommand,
    CreateProductCommand,
    DeleteAttributeCommand,
    DeleteCategoryCommand,
    DeleteProductCommand,
    DeleteProductVariantCommand,
    ListAttributesQuery,
    ListCategoriesQuery,
    ListProductsQuery,
    RebuildSearchIndexCommand,
    RemoveProductImageCommand,
    ReorderProductImagesCommand,
    SearchProductsQuery,
    SetDefaultProductImageCommand,
    UpdateAttributeCommand,
    UpdateCategoryCommand,
    UpdateCategoryParentCommand,
    UpdateProductCommand,
    UpdateProductVariantCommand,
    UpdateVariantStockCommand,
    UploadProductImageCommand,
)
from catalog.api.serializers import (
    AttributeCreateSerializer,
    AttributeUpdateSerializer,
    CategoryCreateSerializer,
    CategoryParentSerializer,
    CategoryUpdateSerializer,
    ProductCreateSerializer,
    ProductImageDefaultSerializer,
    ProductImageOrderSerializer,
    ProductImageUploadSerializer,
    ProductListQuerySerializer,
    ProductSearchQuerySerializer,
    ProductUpdateSerializer,
    SearchIndexRebuildSerializer,
    StatusSerializer,
    VariantCreateSerializer,
    VariantStockSerializer,
    VariantUpdateSerializer,
)
from catalog.infrastructure.factory import CatalogInfrastructureFactory

logger = logging.getLogger(__name__)


def get_category_service():
    """获取分类应用服务实例"""
    return CatalogInfrastructureFactory().create_category_service()


def get_attribute_service():
    return CatalogInfrastructureFactory().create_attribute_service()


def get_product_service():
    return CatalogInfrastructureFactory().create_product_service()


def get_search_service():
    return CatalogInfrastructureFactory().create_search_service()


# ==================== 分类 ====================

class CategoryListCreateView(ApiBaseView):
    """分类列表和创建接口"""
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request):
        """分页获取分类"""
        page, page_size = self.get_page_params(request)
        query = ListCategoriesQuery(
            page=page,
            page_size=page_size,
            parent_id=request.query_params.get("parent_id") or None,
            active_only=request.query_params.get("active_only", "").lower() in ("1", "true"),
        )
        return self.result_response(get_category_service().list_categories(query), "获取分类列表成功")

    def post(self, request):
        """创建分类"""
        data = self.validate(CategoryCreateSerializer, request.data)
        command = CreateCategoryCommand(
            name=data["name"],
            slug=data["slug"],
            description=data.get("description"),
            parent_id=data.get("parent_id"),
        )
        return self.result_response(get_category_service().create_category(command), "分类创建成功", created=True)


class CategoryAllView(ApiBaseView):
    def get(self, request):
        return self.result_response(get_category_service().get_all_categories(), "获取分类成功")


class CategoryRootView(ApiBaseView):
    def get(self, request):
        return self.result_response(get_category_service().get_root_categories(), "获取根分类成功")


class CategoryBySlugView(ApiBaseView):
    def get(self, request, slug):
        return self.result_response(get_category_service().get_category_by_slug(slug), "获取分类成功")


class CategoryDataTableView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def post(self, request):
        result = get_category_service().get_datatable(DataTableRequest.from_dict(request.data))
        return self.result_response(result, "查询成功")


class CategoryDetailView(ApiBaseView):
    """分类详情、更新和删除接口"""
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request, category_id):
        return self.result_response(get_category_service().get_category(category_id), "获取分类成功")

    def put(self, request, category_id):
        data = self.validate(CategoryUpdateSerializer, request.data)
        command = UpdateCategoryCommand(
            id=category_id, name=data["name"], slug=data["slug"], description=data.get("description")
        )
        return self.result_response(get_category_service().update_category(command), "分类更新成功")

    def delete(self, request, category_id):
        result = get_category_service().delete_category(DeleteCategoryCommand(id=category_id))
        return self.result_response(result, "分类删除成功")


class CategoryChildrenView(ApiBaseView):
    def get(self, request, category_id):
        return self.result_response(get_category_service().get_child_categories(category_id), "获取子分类成功")


class CategoryParentView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def put(self, request, category_id):
        data = self.validate(CategoryParentSerializer, request.data)
        command = UpdateCategoryParentCommand(id=category_id, parent_id=data.get("parent_id"))
        return self.result_response(get_category_service().update_parent(command), "父分类更新成功")


class CategoryStatusView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def put(self, request, category_id):
        data = self.validate(StatusSerializer, request.data)
        command = ChangeCategoryStatusCommand(id=category_id, is_active=data["is_active"])
        return self.result_response(get_category_service().change_status(command), "分类状态更新成功")


# ==================== 属性 ====================

class AttributeListCreateView(ApiBaseView):
    """属性列表和创建接口"""
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request):
        page, page_size = self.get_page_params(request)
        is_variant = request.query_params.get("is_variant")
        query = ListAttributesQuery(
            page=page,
            page_size=page_size,
            is_variant=None if is_variant is None else is_variant.lower() in ("1", "true"),
        )
        return self.result_response(get_attribute_service().list_attributes(query), "获取属性列表成功")

    def post(self, request):
        data = self.validate(AttributeCreateSerializer, request.data)
        command = CreateAttributeCommand(**data)
        return self.result_response(get_attribute_service().create_attribute(command), "属性创建成功", created=True)


class AttributeAllView(ApiBaseView):
    def get(self, request):
        return self.result_response(get_attribute_service().get_all_attributes(), "获取属性成功")


class VariantAttributeListView(ApiBaseView):
    def get(self, request):
        return self.result_response(get_attribute_service().get_variant_attributes(), "获取变体属性成功")


class AttributeByNameView(ApiBaseView):
    def get(self, request, name):
        return self.result_response(get_attribute_service().get_attribute_by_name(name), "获取属性成功")


class AttributeDataTableView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def post(self, request):
        result = get_attribute_service().get_datatable(DataTableRequest.from_dict(request.data))
        return self.result_response(result, "查询成功")


class AttributeDetailView(ApiBaseView):
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request, attribute_id):
        return self.result_response(get_attribute_service().get_attribute(attribute_id), "获取属性成功")

    def put(self, request, attribute_id):
        data = self.validate(AttributeUpdateSerializer, request.data)
        command = UpdateAttributeCommand(id=attribute_id, **data)
        return self.result_response(get_attribute_service().update_attribute(command), "属性更新成功")

    def delete(self, request, attribute_id):
        result = get_attribute_service().delete_attribute(DeleteAttributeCommand(id=attribute_id))
        return self.result_response(result, "属性删除成功")


# ==================== 商品 ====================

class ProductListCreateView(ApiBaseView):
    """商品列表和创建接口"""
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request):
        """按条件分页获取商品"""
        page, page_size = self.get_page_params(request)
        filters = self.validate(ProductListQuerySerializer, request.query_params)
        query = ListProductsQuery(page=page, page_size=page_size, **filters)
        return self.result_response(get_product_service().list_products(query), "获取商品列表成功")

    def post(self, request):
        """创建商品"""
        data = self.validate(ProductCreateSerializer, request.data)
        command = CreateProductCommand(
            name=data["name"],
            slug=data["slug"],
            base_price=data["base_price"],
            currency=data["currency"],
            description=data.get("description"),
            sku=data.get("sku") or None,
            is_active=data["is_active"],
            category_ids=data["category_ids"],
            attributes=data["attributes"],
            metadata=data["metadata"],
        )
        return self.result_response(get_product_service().create_product(command), "商品创建成功", created=True)


def _list_param(params, name):
    return [v.strip() for raw in params.getlist(name) for v in raw.split(",") if v.strip()]


class ProductSearchView(ApiBaseView):
    """商品搜索接口，返回当前页商品和分面统计"""

    def get(self, request):
        params = request.query_params
        page, page_size = self.get_page_params(request)
        data = {
            key: params.get(key)
            for key in ("q", "price_min", "price_max", "in_stock_only", "active_only", "sort_by", "sort_descending")
            if params.get(key) not in (None, "")
        }
        data["category_ids"] = _list_param(params, "category_ids")
        data["category_slugs"] = _list_param(params, "category_slugs")
        data["attribute_filters"] = {
            key[len("attr_"):]: _list_param(params, key)
            for key in params.keys() if key.startswith("attr_") and _list_param(params, key)
        }
        filters = self.validate(ProductSearchQuerySerializer, data)

        query = SearchProductsQuery(
            keyword=filters["q"],
            category_ids=filters["category_ids"],
            category_slugs=filters["category_slugs"],
            attribute_filters=filters["attribute_filters"],
            price_min=filters.get("price_min"),
            price_max=filters.get("price_max"),
            in_stock_only=filters["in_stock_only"],
            # 下架商品只对管理员和经理可见
            active_only=filters["active_only"] or not is_staff(request.user),
            page=page,
            page_size=page_size,
            sort_by=filters["sort_by"],
            sort_descending=filters["sort_descending"],
        )
        return self.result_response(get_search_service().search_products(query), "搜索成功")


class SearchIndexRebuildView(ApiBaseView):
    """重建商品搜索索引"""
    permission_classes = [IsAdminOrManager]

    def post(self, request):
        data = self.validate(SearchIndexRebuildSerializer, request.data)
        command = RebuildSearchIndexCommand(clear_existing=data["clear_existing"])
        return self.result_response(get_search_service().rebuild_search_index(command), "搜索索引已重建")


class ProductBySlugView(ApiBaseView):
    def get(self, request, slug):
        return self.result_response(get_product_service().get_product_by_slug(slug), "获取商品成功")


class ProductDataTableView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def post(self, request):
        result = get_product_service().get_datatable(DataTableRequest.from_dict(request.data))
        return self.result_response(result, "查询成功")


class ProductDetailView(ApiBaseView):
    """商品详情、更新和删除接口"""
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request, product_id):
        return self.result_response(get_product_service().get_product(product_id), "获取商品成功")

    def put(self, request, product_id):
        data = self.validate(ProductUpdateSerializer, request.data)
        command = UpdateProductCommand(
            id=product_id,
            name=data["name"],
            slug=data["slug"],
            base_price=data["base_price"],
            currency=data["currency"],
            description=data.get("description"),
            sku=data.get("sku") or None,
            category_ids=data.get("category_ids"),
            attributes=data.get("attributes"),
        )
        return self.result_response(get_product_service().update_product(command), "商品更新成功")

    def delete(self, request, product_id):
        result = get_product_service().delete_product(DeleteProductCommand(id=product_id))
        return self.result_response(result, "商品删除成功")


class ProductStatusView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def put(self, request, product_id):
        data = self.validate(StatusSerializer, request.data)
        command = ChangeProductStatusCommand(id=product_id, is_active=data["is_active"])
        return self.result_response(get_product_service().change_status(command), "商品状态更新成功")


class ProductVariantListCreateView(ApiBaseView):
    """商品变体列表和添加接口"""
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request, product_id):
        return self.result_response(get_product_service().get_product_variants(product_id), "获取变体成功")

    def post(self, request, product_id):
        data = self.validate(VariantCreateSerializer, request.data)
        command = AddProductVariantCommand(
            product_id=product_id,
            sku=data.get("sku") or None,
            price=data.get("price"),
            stock_quantity=data["stock_quantity"],
            is_active=data["is_active"],
            metadata=data["metadata"],
            attributes=data["attributes"],
        )
        return self.result_response(get_product_service().add_variant(command), "变体添加成功", created=True)


class ProductImageUploadView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def post(self, request, product_id):
        """上传商品图片，表单字段file为图片文件"""
        data = self.validate(ProductImageUploadSerializer, request.data)
        upload = data["file"]
        logger.info(f"上传商品图片: {product_id} {upload.name} ({upload.size} bytes)")
        command = UploadProductImageCommand(
            product_id=product_id,
            content=upload.read(),
            filename=upload.name,
            content_type=getattr(upload, "content_type", None) or "application/octet-stream",
            size=upload.size,
            alt_text=data["alt_text"],
            is_default=data["is_default"],
            display_order=data.get("display_order"),
            variant_id=data.get("variant_id"),
        )
        return self.result_response(get_product_service().upload_image(command), "图片上传成功", created=True)


class ProductImageDeleteView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def delete(self, request, product_id, image_key):
        command = RemoveProductImageCommand(
            product_id=product_id,
            image_key=image_key,
            variant_id=request.query_params.get("variant_id") or None,
        )
        return self.result_response(get_product_service().remove_image(command), "图片删除成功")


class ProductImageDefaultView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def put(self, request, product_id):
        data = self.validate(ProductImageDefaultSerializer, request.data)
        command = SetDefaultProductImageCommand(product_id=product_id, image_key=data["image_key"])
        return self.result_response(get_product_service().set_default_image(command), "默认图片已更新")


class ProductImageOrderView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def put(self, request, product_id):
        data = self.validate(ProductImageOrderSerializer, request.data)
        command = ReorderProductImagesCommand(product_id=product_id, orders=data["orders"])
        return self.result_response(get_product_service().reorder_images(command), "图片顺序已更新")


# ==================== 变体 ====================

class VariantDetailView(ApiBaseView):
    """变体详情、更新和删除接口"""
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request, variant_id):
        return self.result_response(get_product_service().get_variant(variant_id), "获取变体成功")

    def put(self, request, variant_id):
        data = self.validate(VariantUpdateSerializer, request.data)
        command = UpdateProductVariantCommand(
            variant_id=variant_id,
            sku=data.get("sku") or None,
            price=data.get("price"),
            metadata=data.get("metadata"),
            attributes=data.get("attributes"),
        )
        return self.result_response(get_product_service().update_variant(command), "变体更新成功")

    def delete(self, request, variant_id):
        result = get_product_service().delete_variant(DeleteProductVariantCommand(variant_id=variant_id))
        return self.result_response(result, "变体删除成功")


class VariantBySkuView(ApiBaseView):
    def get(self, request, sku):
        return self.result_response(get_product_service().get_variant_by_sku(sku), "获取变体成功")


class VariantStatusView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def put(self, request, variant_id):
        data = self.validate(StatusSerializer, request.data)
        command = ChangeVariantStatusCommand(variant_id=variant_id, is_active=data["is_active"])
        return self.result_response(get_product_service().change_variant_status(command), "变体状态更新成功")


class VariantStockView(ApiBaseView):
    permission_classes = [IsAdminOrManager]

    def put(self, request, variant_id):
        data = self.validate(VariantStockSerializer, request.data)
        command = UpdateVariantStockCommand(
            variant_id=variant_id, quantity=data["quantity"], operation=data["operation"]
        )
        return self.result_response(get_product_service().update_variant_stock(command), "库存更新成功")
