"""
Page/limit pagination with the audit log contract:

    {success, data, pagination: {currentPage, totalPages, totalItems,
                                 itemsPerPage, hasNextPage, hasPrevPage}}

A page past the end yields an empty ``data`` list rather than a 404.
"""
import math

from django.conf import settings
from rest_framework.pagination import BasePagination
from rest_framework.response import Response


class AuditLogPagination(BasePagination):
    page_query_param = 'page'
    page_size_query_param = 'limit'

    def paginate_queryset(self, queryset, request, view=None, page=1, limit=None):
        self.page_number = page
        self.page_size = limit or settings.AUDIT_LOG_PAGE_SIZE
        self.total_items = queryset.count()

        offset = (self.page_number - 1) * self.page_size
        return list(queryset[offset:offset + self.page_size])

    def get_pagination_data(self):
        total_pages = math.ceil(self.total_items / self.page_size) if self.total_items else 0
        return {
            'currentPage': self.page_number,
            'totalPages': total_pages,
            'totalItems': self.total_items,
            'itemsPerPage': self.page_size,
            'hasNextPage': self.page_number < total_pages,
            'hasPrevPage': self.page_number > 1,
        }

    def get_paginated_response(self, data):
        return Response({
            'success': True,
            'data': data,
            'pagination': self.get_pagination_data(),
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'success': {'type': 'boolean'},
                'data': schema,
                'pagination': {
                    'type': 'object',
                    'properties': {
                        'currentPage': {'type': 'integer'},
                        'totalPages': {'type': 'integer'},
                        'totalItems': {'type': 'integer'},
                        'itemsPerPage': {'type': 'integer'},
                        'hasNextPage': {'type': 'boolean'},
                        'hasPrevPage': {'type': 'boolean'},
                    },
                },
            },
        }
