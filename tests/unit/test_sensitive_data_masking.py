import pytest

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    @pytest.mark.parametrize(
        "value, secret",
        [
            ("password='s3cret123'", "s3cret123"),
            ("passwd=hunter2", "hunter2"),
            ("token=abc123xyz", "abc123xyz"),
            ("client_secret: zzz999", "zzz999"),
            ("api_key=k-123", "k-123"),
            ("API-KEY=k-456", "k-456"),
        ],
    )
    def test_secret_values_masked(self, value, secret):
        from config.settings import mask_sensitive_data

        result = mask_sensitive_data(None, None, {"event": "test", "data": value})
        assert secret not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_key_name_is_kept(self):
        from config.settings import mask_sensitive_data

        result = mask_sensitive_data(None, None, {"event": "test", "data": "token=abc"})
        assert result["data"] == "token=***MASKED***"

    def test_non_string_values_untouched(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "variant.saved", "version": 2, "attributes": {"size": "M"}}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["version"] == 2
        assert result["attributes"] == {"size": "M"}

    def test_catalog_data_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "product.created", "product_id": "0192-abc", "name": "Basic T-Shirt"}
        result = mask_sensitive_data(None, None, dict(event_dict))
        assert result == event_dict
