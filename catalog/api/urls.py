"""
商品目录API URL配置。
定义RESTful API的路由映射。
"""
from django.urls import path

from catalog.api import views

urlpatterns = [
    # 分类API
    path('categories/', views.CategoryListCreateView.as_view(), name='category-list-create'),
    path('categories/all/', views.CategoryAllView.as_view(), name='category-all'),
    path('categories/root/', views.CategoryRootView.as_view(), name='category-root'),
    path('categories/datatable/', views.CategoryDataTableView.as_view(), name='category-datatable'),
    path('categories/slug/<str:slug>/', views.CategoryBySlugView.as_view(), name='category-by-slug'),
    path('categories/<uuid:category_id>/', views.CategoryDetailView.as_view(), name='category-detail'),
    path('categories/<uuid:category_id>/children/', views.CategoryChildrenView.as_view(), name='category-children'),
    path('categories/<uuid:category_id>/parent/', views.CategoryParentView.as_view(), name='category-parent'),
    path('categories/<uuid:category_id>/status/', views.CategoryStatusView.as_view(), name='category-status'),

    # 属性API
    path('attributes/', views.AttributeListCreateView.as_view(), name='attribute-list-create'),
    path('attributes/all/', views.AttributeAllView.as_view(), name='attribute-all'),
    path('attributes/variant/', views.VariantAttributeListView.as_view(), name='attribute-variant'),
    path('attributes/datatable/', views.AttributeDataTableView.as_view(), name='attribute-datatable'),
    path('attributes/name/<str:name>/', views.AttributeByNameView.as_view(), name='attribute-by-name'),
    path('attributes/<uuid:attribute_id>/', views.AttributeDetailView.as_view(), name='attribute-detail'),

    # 商品API
    path('products/', views.ProductListCreateView.as_view(), name='product-list-create'),
    path('products/datatable/', views.ProductDataTableView.as_view(), name='product-datatable'),
    path('products/search/', views.ProductSearchView.as_view(), name='product-search'),
    path('products/slug/<str:slug>/', views.ProductBySlugView.as_view(), name='product-by-slug'),
    path('products/<uuid:product_id>/', views.ProductDetailView.as_view(), name='product-detail'),
    path('products/<uuid:product_id>/status/', views.ProductStatusView.as_view(), name='product-status'),
    path('products/<uuid:product_id>/variants/', views.ProductVariantListCreateView.as_view(), name='product-variants'),
    path('products/<uuid:product_id>/images/', views.ProductImageUploadView.as_view(), name='product-image-upload'),
    path('products/<uuid:product_id>/images/default/', views.ProductImageDefaultView.as_view(),
         name='product-image-default'),
    path('products/<uuid:product_id>/images/order/', views.ProductImageOrderView.as_view(), name='product-image-order'),
    path('products/<uuid:product_id>/images/<path:image_key>', views.ProductImageDeleteView.as_view(),
         name='product-image-delete'),

    # 搜索索引API
    path('administration/search/rebuild/', views.SearchIndexRebuildView.as_view(), name='search-index-rebuild'),

    # 变体API
    path('variants/sku/<str:sku>/', views.VariantBySkuView.as_view(), name='variant-by-sku'),
    path('variants/<uuid:variant_id>/', views.VariantDetailView.as_view(), name='variant-detail'),
    path('variants/<uuid:variant_id>/status/', views.VariantStatusView.as_view(), name='variant-status'),
    path('variants/<uuid:variant_id>/stock/', views.VariantStockView.as_view(), name='variant-stock'),
]
