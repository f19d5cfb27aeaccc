from jsonrpc_client.classifier import MessageClassifier, MessageKind, invalid_request_reply
from jsonrpc_client.errors import ErrorKind


def test_classifier_error_response():
    classifier = MessageClassifier()
    result = classifier.classify(
        {"jsonrpc": "2.0", "error": {"code": -32601, "message": "Method not found."}, "id": 1}
    )
    assert result.kind is MessageKind.error_response
    assert result.id == 1
    assert result.error.code == -32601
    assert result.error.raw == {"code": -32601, "message": "Method not found."}


def test_error_takes_precedence_over_result():
    classifier = MessageClassifier()
    result = classifier.classify({"result": 1, "error": {"code": 1, "message": "x"}, "id": 1})
    assert result.kind is MessageKind.error_response


def test_null_result_is_a_response():
    classifier = MessageClassifier()
    result = classifier.classify({"jsonrpc": "2.0", "result": None, "id": 3})
    assert result.kind is MessageKind.response
    assert result.id == 3
    assert result.result is None


def test_null_error_falls_through_to_response():
    classifier = MessageClassifier()
    result = classifier.classify({"error": None, "result": 0, "id": 2})
    assert result.kind is MessageKind.response
    assert result.result == 0


def test_empty_error_object_still_rejects():
    classifier = MessageClassifier()
    result = classifier.classify({"error": {}, "id": 4})
    assert result.kind is MessageKind.error_response
    assert result.id == 4
    assert result.error.code == ErrorKind.INTERNAL_ERROR.code
    assert result.error.data == {}


def test_response_without_id_is_unrecognized():
    classifier = MessageClassifier()
    result = classifier.classify({"jsonrpc": "2.0", "result": 1})
    assert result.kind is MessageKind.unrecognized
    assert result.reply == {
        "jsonrpc": "2.0",
        "error": {"code": -32600, "message": ErrorKind.INVALID_REQUEST.message},
        "id": None,
    }


def test_inbound_request_is_tagged():
    classifier = MessageClassifier()
    result = classifier.classify({"jsonrpc": "2.0", "method": "ping", "id": 9})
    assert result.kind is MessageKind.inbound_request
    assert result.method == "ping"
    assert result.id == 9


def test_non_object_is_unrecognized():
    classifier = MessageClassifier()
    assert classifier.classify(42).kind is MessageKind.unrecognized
    assert classifier.classify("hello").kind is MessageKind.unrecognized


def test_batch_members_are_classified_individually():
    classifier = MessageClassifier()
    results = classifier.classify_all(
        [{"result": 1, "id": 1}, {"error": {"code": -32602, "message": "bad"}, "id": 2}, 7]
    )
    assert [r.kind for r in results] == [
        MessageKind.response,
        MessageKind.error_response,
        MessageKind.unrecognized,
    ]


def test_empty_batch_is_unrecognized():
    classifier = MessageClassifier()
    [result] = classifier.classify_all([])
    assert result.kind is MessageKind.unrecognized
    assert result.reply == invalid_request_reply()


def test_classify_contains_internal_failures(monkeypatch):
    def boom(self, value):
        raise RuntimeError("boom")

    monkeypatch.setattr(MessageClassifier, "_classify", boom)
    result = MessageClassifier().classify({"result": 1, "id": 1})
    assert result.kind is MessageKind.failed
    assert result.reason == "boom"
