"""Tests for the command dispatcher."""

from __future__ import annotations

import json

import pytest

from ride_tools.api.context import ServerContext
from ride_tools.api.dispatcher import Dispatcher
from ride_tools.world.sandbox import SandboxWorld

CREATE = {"typeId": 52, "objectId": 1, "entranceObjectId": 0, "colour1": 2, "colour2": 5}


def request(endpoint: str, params: dict | None = None, **extra) -> str:
    body: dict = {"endpoint": endpoint}
    if params is not None:
        body["params"] = params
    body.update(extra)
    return json.dumps(body)


class TestMalformedInput:
    """Messages that never reach a handler."""

    def test_invalid_json(self, dispatcher, run):
        response = run(dispatcher.handle_message("{not json"))
        assert response["success"] is False
        assert response["error"] == "Invalid JSON"
        assert response["errorType"] == "MALFORMED_MESSAGE"

    def test_non_object_document(self, dispatcher, run):
        response = run(dispatcher.handle_message("[1, 2, 3]"))
        assert response["errorType"] == "MALFORMED_MESSAGE"

    def test_blank_line_ignored(self, dispatcher, run):
        assert run(dispatcher.handle_message("   ")) is None

    @pytest.mark.parametrize("body", ['{"params": {}}', '{"endpoint": ""}', '{"endpoint": 5}'])
    def test_missing_endpoint(self, dispatcher, run, body):
        response = run(dispatcher.handle_message(body))
        assert response["success"] is False
        assert response["errorType"] == "MISSING_ENDPOINT"

    def test_unknown_endpoint(self, dispatcher, run):
        response = run(dispatcher.handle_message(request("flyToMoon")))
        assert response["errorType"] == "UNKNOWN_ENDPOINT"
        assert "flyToMoon" in response["error"]
        assert response["suggestions"]

    def test_non_object_params(self, dispatcher, run):
        response = run(dispatcher.handle_message(request("listAll", [1])))
        assert response["errorType"] == "INVALID_PARAMETERS"
        assert response["context"]["field"] == "params"


class TestParameterValidation:
    """Handlers reject bad params naming the field."""

    def test_missing_construct_id(self, dispatcher, run):
        response = run(dispatcher.handle_message(request("getValidNextPieces", {})))
        assert response["errorType"] == "INVALID_PARAMETERS"
        assert "constructId" in response["error"]
        assert response["context"]["field"] == "constructId"

    def test_string_construct_id_rejected(self, dispatcher, run):
        response = run(dispatcher.handle_message(request("getStats", {"constructId": "0"})))
        assert response["errorType"] == "INVALID_PARAMETERS"
        assert response["context"]["field"] == "constructId"

    def test_direction_out_of_range(self, dispatcher, run):
        params = {"x": 1, "y": 1, "z": 0, "direction": 4, "constructId": 0, "pieceType": 0}
        response = run(dispatcher.handle_message(request("placePiece", params)))
        assert response["context"]["field"] == "direction"

    def test_create_aliases(self, dispatcher, run):
        params = {"rideType": 52, "rideObject": 1, "entranceObject": 0, "colour1": 0, "colour2": 0}
        response = run(dispatcher.handle_message(request("create", params)))
        assert response == {"success": True, "payload": {"constructId": 0}}


class TestEndpoints:
    """Round trips through the dispatcher."""

    def test_delete_all_with_nothing(self, dispatcher, run):
        response = run(dispatcher.handle_message(request("deleteAll")))
        assert response["success"] is True
        assert response["payload"]["message"] == "No constructs to demolish."

    def test_id_echoed(self, dispatcher, run):
        response = run(dispatcher.handle_message(request("listAll", id="req-7")))
        assert response == {"success": True, "payload": [], "id": "req-7"}

    def test_id_echoed_on_error(self, dispatcher, run):
        response = run(dispatcher.handle_message(request("nope", id=3)))
        assert response["id"] == 3
        assert response["success"] is False

    def test_construct_not_found(self, dispatcher, run):
        response = run(dispatcher.handle_message(request("startTest", {"constructId": 12})))
        assert response["errorType"] == "CONSTRUCT_NOT_FOUND"
        assert response["context"] == {"constructId": 12}

    def test_build_session(self, dispatcher, run):
        """create, placePiece, getValidNextPieces, deleteLastPiece in sequence."""

        async def scenario():
            created = await dispatcher.handle_message(request("create", CREATE))
            cid = created["payload"]["constructId"]
            placed = await dispatcher.handle_message(
                request(
                    "placePiece",
                    {"x": 5, "y": 5, "z": 0, "direction": 0, "constructId": cid, "pieceType": 0},
                )
            )
            valid = await dispatcher.handle_message(
                request("getValidNextPieces", {"constructId": cid})
            )
            undone = await dispatcher.handle_message(
                request("deleteLastPiece", {"constructId": cid})
            )
            again = await dispatcher.handle_message(
                request("deleteLastPiece", {"constructId": cid})
            )
            return placed, valid, undone, again

        placed, valid, undone, again = run(scenario())

        assert placed["payload"] == {
            "nextPosition": {"x": 6, "y": 5, "z": 0, "direction": 0},
            "isCircuitComplete": False,
            "historyLength": 1,
            "message": "Track piece placed.",
        }
        assert valid["payload"]["stateCategory"] == "flat"
        assert valid["payload"]["position"] == {"x": 6, "y": 5, "z": 0, "direction": 0}
        assert undone["payload"] == {
            "remaining": 0,
            "nextPosition": None,
            "isCircuitComplete": False,
            "removedPieceType": 0,
        }
        assert again["errorType"] == "NOTHING_TO_UNDO"

    def test_placement_rejected_response(self, dispatcher, run):
        async def scenario():
            await dispatcher.handle_message(request("create", CREATE))
            params = {"x": 5, "y": 5, "z": 0, "direction": 0, "constructId": 0, "pieceType": 0}
            await dispatcher.handle_message(request("placePiece", params))
            return await dispatcher.handle_message(request("placePiece", params))

        response = run(scenario())

        assert response["success"] is False
        assert response["errorType"] == "PLACEMENT_REJECTED"
        assert "already something there" in response["error"]

    def test_list_endpoints(self, dispatcher, run):
        response = run(dispatcher.handle_message(request("listEndpoints")))
        names = {e["name"] for e in response["payload"]}
        assert {"listAll", "placePiece", "deleteLastPiece", "placeEntranceExit"} <= names

    def test_responses_are_json_serializable(self, dispatcher, run):
        async def scenario():
            responses = [await dispatcher.handle_message(request("create", CREATE))]
            for endpoint in ("listAll", "listAllSegments", "listEndpoints"):
                responses.append(await dispatcher.handle_message(request(endpoint)))
            for endpoint in ("getStats", "getSession", "dumpConstruct", "getValidNextPieces"):
                responses.append(
                    await dispatcher.handle_message(request(endpoint, {"constructId": 0}))
                )
            return responses

        for response in run(scenario()):
            assert response["success"] is True, response
            json.dumps(response)


class _ExplodingWorld(SandboxWorld):
    def find_all_constructs(self):
        raise RuntimeError("boom")


class TestInternalErrors:
    """Unexpected exceptions become INTERNAL_ERROR responses."""

    def test_internal_error(self, run):
        dispatcher = Dispatcher(ServerContext(world=_ExplodingWorld()))
        response = run(dispatcher.handle_message(request("listAll")))
        assert response["success"] is False
        assert response["errorType"] == "INTERNAL_ERROR"
        assert "boom" in response["error"]
