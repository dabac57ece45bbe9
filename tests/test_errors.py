from __future__ import annotations

from issuecsv.errors import ConfigError, FormatError, StoreError, classify_error, redact


def test_classify_format():
    info = classify_error(FormatError('Missing required columns: Project'))
    assert info.category == 'format'
    assert info.transient is False


def test_classify_config():
    assert classify_error(ConfigError('bad')).category == 'config'


def test_classify_store_client_error():
    info = classify_error(StoreError('POST /tags failed with 422', operation='POST /tags', status=422))
    assert info.category == 'store'
    assert info.details == {'operation': 'POST /tags', 'status': 422}


def test_classify_store_server_error_is_transient():
    info = classify_error(StoreError('GET /tags failed with 503', status=503))
    assert info.category == 'network'
    assert info.transient is True


def test_classify_store_transport_error():
    info = classify_error(StoreError('GET /projects failed: Connection refused'))
    assert info.category == 'network'


def test_classify_generic():
    info = classify_error(ValueError('Some other problem'))
    assert info.category == 'generic'
    assert info.as_dict()['type'] == 'ValueError'


def test_redact_tokens():
    sample = 'Authorization: Bearer abcdef1234567890 url?token=s3cr3t&x=1'
    out = redact(sample)
    assert 'abcdef1234567890' not in out
    assert 's3cr3t' not in out
    assert out.count('<redacted>') == 2
