import pytest
from pathlib import Path
from unittest.mock import MagicMock, patch

from dircontacts.domain.errors import DirectoryUnavailableError
from dircontacts.domain.models.contacts import PersonRecord
from dircontacts.infrastructure.people.google_people_client import (
    GooglePeopleDirectory, person_from_response,
)

@pytest.fixture
def mock_service():
    """Mocks the discovery-built People API service resource."""
    service = MagicMock()
    service.contactGroups.return_value.get.return_value.execute.return_value = {
        "resourceName": "contactGroups/all",
        "memberCount": 3,
        "memberResourceNames": ["people/c1", "people/c2"],
    }
    service.people.return_value.getBatchGet.return_value.execute.return_value = {
        "responses": [
            {"person": {
                "names": [{"displayName": "Bob Jones"}, {"displayName": "Bobby"}],
                "emailAddresses": [{"value": "bob@x.com"}, {"value": "bob@home.org"}],
            }},
            {"person": {"emailAddresses": [{"value": "anon@x.com"}]}},
            {"httpStatusCode": 404},
        ]
    }
    return service

@pytest.fixture
def directory(mock_service):
    return GooglePeopleDirectory(credentials=MagicMock(), service=mock_service)

def test_person_from_response():
    person = {"names": [{"displayName": "Ann"}], "emailAddresses": [{"value": "a@x.com"}, {"type": "home"}]}
    assert person_from_response(person) == PersonRecord(display_names=("Ann",), email_addresses=("a@x.com",))
    assert person_from_response({}) == PersonRecord()

@pytest.mark.asyncio
async def test_list_group_members(directory, mock_service):
    listing = await directory.list_group_members("contactGroups/all", 10000)

    assert listing.member_ids == ["people/c1", "people/c2"]
    assert listing.total_count == 3
    mock_service.contactGroups.return_value.get.assert_called_once_with(
        resourceName="contactGroups/all", maxMembers=10000
    )

@pytest.mark.asyncio
async def test_batch_get_people(directory, mock_service):
    records = await directory.batch_get_people(["people/c1", "people/c2", "people/c3"])

    assert records == [
        PersonRecord(display_names=("Bob Jones", "Bobby"), email_addresses=("bob@x.com", "bob@home.org")),
        PersonRecord(display_names=(), email_addresses=("anon@x.com",)),
        PersonRecord(),
    ]
    mock_service.people.return_value.getBatchGet.assert_called_once_with(
        resourceNames=["people/c1", "people/c2", "people/c3"],
        personFields="names,emailAddresses",
    )

@pytest.mark.asyncio
async def test_api_errors_propagate(directory, mock_service):
    mock_service.people.return_value.getBatchGet.return_value.execute.side_effect = RuntimeError("quota exceeded")
    with pytest.raises(RuntimeError, match="quota"):
        await directory.batch_get_people(["people/c1"])

def test_from_token_file_missing(tmp_path: Path):
    with pytest.raises(DirectoryUnavailableError, match="not found"):
        GooglePeopleDirectory.from_token_file(tmp_path / "token.json")

@patch('dircontacts.infrastructure.people.google_people_client.Credentials')
def test_from_token_file(mock_credentials, tmp_path: Path):
    token = tmp_path / "token.json"
    token.write_text("{}")
    client = GooglePeopleDirectory.from_token_file(token)

    mock_credentials.from_authorized_user_file.assert_called_once()
    assert client.credentials is mock_credentials.from_authorized_user_file.return_value

@patch('dircontacts.infrastructure.people.google_people_client.Credentials')
def test_from_token_file_unreadable(mock_credentials, tmp_path: Path):
    token = tmp_path / "token.json"
    token.write_text("not json")
    mock_credentials.from_authorized_user_file.side_effect = ValueError("bad token")
    with pytest.raises(DirectoryUnavailableError, match="bad token"):
        GooglePeopleDirectory.from_token_file(token)

@patch('dircontacts.infrastructure.people.google_people_client.build')
def test_service_is_built_lazily(mock_build):
    client = GooglePeopleDirectory(credentials=MagicMock())
    mock_build.assert_not_called()
    assert client.service is mock_build.return_value
    assert client.service is mock_build.return_value
    mock_build.assert_called_once()
