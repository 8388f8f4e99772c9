"""User directory: registration, credentials, profile updates, administration."""
import re

import pytest

from activity_tracker.errors import DuplicateKey, Forbidden, InvalidCredentials, NotFound, ValidationError
from activity_tracker.services import users as user_service

from conftest import PASSWORD, make_profile


def test_student_gets_generated_id(memory_store):
    user = user_service.create_user(memory_store, make_profile('Carol', 'Carol@Example.edu'))

    assert re.fullmatch(r'CS\d{4}\d{4}', user.student_id)
    assert user.email == 'carol@example.edu'
    assert user.role == 'student'
    assert user.year == 'Freshman'
    assert user.password_hash != PASSWORD


def test_student_id_prefix_is_configurable(memory_store):
    user = user_service.create_user(memory_store, make_profile('Dan', 'dan@example.edu'), student_id_prefix='EE')
    assert user.student_id.startswith('EE')


def test_faculty_has_no_student_id(people):
    assert people['faculty'].student_id is None


def test_duplicate_email_rejected(memory_store, people):
    with pytest.raises(DuplicateKey):
        user_service.create_user(memory_store, make_profile('Other', 'ALICE@example.edu'))


def test_duplicate_student_id_rejected(memory_store, people):
    with pytest.raises(DuplicateKey):
        user_service.create_user(memory_store, make_profile('Other', 'other@example.edu', studentId='CS20240001'))


@pytest.mark.parametrize('missing', ['name', 'email', 'department'])
def test_required_fields(memory_store, missing):
    profile = make_profile('Eve', 'eve@example.edu')
    profile[missing] = ''
    with pytest.raises(ValidationError):
        user_service.create_user(memory_store, profile)


def test_gpa_out_of_range(memory_store):
    with pytest.raises(ValidationError):
        user_service.create_user(memory_store, make_profile('Eve', 'eve@example.edu', gpa=4.5))


def test_verify_credentials(memory_store, people):
    user = user_service.verify_credentials(memory_store, 'alice@example.edu', PASSWORD, 'student')
    assert user is people['alice']
    assert user.last_login is not None


def test_verify_credentials_wrong_password(memory_store, people):
    with pytest.raises(InvalidCredentials):
        user_service.verify_credentials(memory_store, 'alice@example.edu', 'nope', 'student')


def test_verify_credentials_wrong_role(memory_store, people):
    with pytest.raises(InvalidCredentials):
        user_service.verify_credentials(memory_store, 'alice@example.edu', PASSWORD, 'faculty')


def test_deactivated_account_cannot_log_in(memory_store, people):
    user_service.set_active(memory_store, people['admin'], people['alice'].id, False)
    with pytest.raises(Forbidden):
        user_service.verify_credentials(memory_store, 'alice@example.edu', PASSWORD)


def test_update_profile_applies_only_given_fields(memory_store, people):
    alice = people['alice']
    user_service.update_profile(memory_store, alice.id, {
        'year': 'Junior',
        'gpa': 3.9,
        'studentId': 'HACKED',
        'email': 'new@example.edu',
        'preferences': {'theme': 'dark'},
    })

    assert alice.year == 'Junior'
    assert alice.gpa == 3.9
    assert alice.name == 'Alice'
    assert alice.student_id == 'CS20240001'
    assert alice.email == 'alice@example.edu'
    assert alice.preferences['theme'] == 'dark'
    assert alice.preferences['notifications'] == {'email': True, 'push': True}


def test_update_profile_unknown_user(memory_store):
    with pytest.raises(NotFound):
        user_service.update_profile(memory_store, 999, {'name': 'Ghost'})


def test_update_profile_rejects_bad_year(memory_store, people):
    with pytest.raises(ValidationError):
        user_service.update_profile(memory_store, people['alice'].id, {'year': 'Fifth'})


def test_change_password(memory_store, people):
    alice = people['alice']
    with pytest.raises(ValidationError):
        user_service.change_password(memory_store, alice, 'wrong', 'newsecret')

    user_service.change_password(memory_store, alice, PASSWORD, 'newsecret')
    assert user_service.verify_credentials(memory_store, 'alice@example.edu', 'newsecret')


def test_set_role_requires_admin(memory_store, people):
    with pytest.raises(Forbidden):
        user_service.set_role(memory_store, people['faculty'], people['alice'].id, 'admin')


def test_admin_cannot_change_own_role(memory_store, people):
    with pytest.raises(Forbidden):
        user_service.set_role(memory_store, people['admin'], people['admin'].id, 'student')


def test_admin_changes_role(memory_store, people):
    user = user_service.set_role(memory_store, people['admin'], people['faculty'].id, 'admin')
    assert user.role == 'admin'


@pytest.mark.parametrize('field, value', [('name', 5), ('email', 5), ('department', ['CS']), ('password', 123456)])
def test_non_text_profile_fields(memory_store, field, value):
    profile = make_profile('Eve', 'eve@example.edu')
    profile[field] = value
    with pytest.raises(ValidationError):
        user_service.create_user(memory_store, profile)
    assert memory_store.users == {}


def test_verify_credentials_with_non_text_input(memory_store, people):
    with pytest.raises(InvalidCredentials):
        user_service.verify_credentials(memory_store, 5, PASSWORD)
    with pytest.raises(InvalidCredentials):
        user_service.verify_credentials(memory_store, 'alice@example.edu', 123456)


def test_update_profile_rejects_non_text_name(memory_store, people):
    with pytest.raises(ValidationError):
        user_service.update_profile(memory_store, people['alice'].id, {'name': 42})
    assert people['alice'].name == 'Alice'


def test_change_password_rejects_non_text(memory_store, people):
    with pytest.raises(ValidationError):
        user_service.change_password(memory_store, people['alice'], PASSWORD, 1234567)
