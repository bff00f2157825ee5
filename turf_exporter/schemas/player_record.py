"""Player statistics schemas for the Turf users API."""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class Region(BaseModel):
    """Region a player is currently playing in."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field("", description="Region name")
    id: int = Field(0, description="Region id")


class PlayerRecord(BaseModel):
    """One player's statistics as returned by a single poll.

    Missing fields decode to zero values so a partial upstream response still
    yields a usable record.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., description="Player name")
    id: int = Field(0, description="Player id")
    country: str = Field("", description="Country code")
    medals: list[int] = Field(default_factory=list, description="Medal ids")
    zones: list[int] = Field(default_factory=list, description="Zones currently owned")
    points_per_hour: int = Field(0, alias="pointsPerHour")
    points: int = Field(0, description="Points received this round")
    blocktime: int = Field(0)
    taken: int = Field(0, description="Number of zones taken")
    total_points: int = Field(0, alias="totalPoints")
    rank: int = Field(0)
    place: int = Field(0)
    unique_zones_taken: int = Field(0, alias="uniqueZonesTaken")
    region: Region = Field(default_factory=Region)


_PLAYER_RECORD_LIST = TypeAdapter(list[PlayerRecord])


def decode_player_records(body: bytes | str) -> list[PlayerRecord]:
    """Decode a users API response body.

    Raises:
        pydantic.ValidationError: body is not valid JSON, not an array, or
            holds a record with a wrongly typed field
    """
    return _PLAYER_RECORD_LIST.validate_json(body)


def build_request_body(players: list[str]) -> list[dict[str, str]]:
    """Build the users API request payload, preserving roster order."""
    return [{"name": player} for player in players]
