from jsonrpc_client.errors import ErrorKind, JsonRpcError


def test_error_catalog_codes():
    assert ErrorKind.PARSE_ERROR.code == -32700
    assert ErrorKind.INVALID_REQUEST.code == -32600
    assert ErrorKind.METHOD_NOT_FOUND.code == -32601
    assert ErrorKind.INVALID_PARAMS.code == -32602
    assert ErrorKind.INTERNAL_ERROR.code == -32603


def test_error_kind_to_dict_and_lookup():
    assert ErrorKind.INVALID_REQUEST.to_dict() == {
        "code": -32600,
        "message": "Invalid Request. The JSON sent is not a valid Request object.",
    }
    assert ErrorKind.from_code(-32601) is ErrorKind.METHOD_NOT_FOUND
    assert ErrorKind.from_code(-32000) is None


def test_jsonrpc_error_payload():
    error = JsonRpcError(-32602, "Invalid params", data={"field": "x"})
    assert error.kind is ErrorKind.INVALID_PARAMS
    assert error.to_dict() == {"code": -32602, "message": "Invalid params", "data": {"field": "x"}}
    assert error.raw == error.to_dict()
    assert "-32602" in str(error)
