import pytest

from ..models import Request, RequestAttributes


class TestRequestAttributes:
    def test_unmanaged(self):
        assert not RequestAttributes().is_managed
        assert not RequestAttributes(resource_class="Foo").is_managed
        assert not RequestAttributes(collection_operation_name="post").is_managed

    def test_managed(self):
        attributes = RequestAttributes(resource_class="Foo", item_operation_name="put")
        assert attributes.is_managed
        assert attributes.operation_name == "put"
        assert attributes.as_context_options() == {
            "resource_class": "Foo",
            "item_operation_name": "put",
        }

    def test_collection_operation_takes_precedence(self):
        attributes = RequestAttributes(
            resource_class="Foo", collection_operation_name="post", item_operation_name="put"
        )
        assert attributes.operation_name == "post"
        assert attributes.as_context_options() == {
            "resource_class": "Foo",
            "collection_operation_name": "post",
        }


class TestRequest:
    @pytest.mark.parametrize(
        "method,safe",
        [("GET", True), ("head", True), ("OPTIONS", True), ("TRACE", True)]
        + [("POST", False), ("put", False), ("PATCH", False), ("DELETE", False)],
    )
    def test_is_method_safe(self, method, safe):
        assert Request(method=method).is_method_safe() is safe

    @pytest.mark.parametrize(
        "content_type,mime_type",
        [
            (None, None),
            ("", None),
            (" ; charset=utf-8", None),
            ("application/json", "application/json"),
            ("Application/JSON; charset=UTF-8", "application/json"),
        ],
    )
    def test_mime_type(self, content_type, mime_type):
        assert Request(content_type=content_type).mime_type == mime_type
