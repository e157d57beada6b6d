import uuid

import pytest
from django.contrib.auth.models import AnonymousUser

from apps.accounts.models import KYCDocument, KYCStatus, User, UserRole
from apps.accounts.services import (
    InsufficientPermissionsError,
    InvalidCredentialsError,
    InvalidKYCStatusError,
    InvalidRoleError,
    LastSuperAdminError,
    UserNotFoundError,
    UserRegistrationError,
    add_kyc_document,
    assign_user_role,
    authenticate_user,
    bulk_update_kyc_status,
    can_remove_admin,
    check_admin_access,
    cleanup_invalid_kyc_documents,
    count_admin_users,
    delete_user,
    get_current_user_role,
    get_users_by_kyc_status,
    promote_user_to_admin,
    register_user,
    revoke_admin_access,
    update_user_kyc_status,
    validate_admin_action,
)


# =============================================================================
# Registration and authentication
# =============================================================================

@pytest.mark.django_db
class TestRegisterUser:

    def test_new_user_starts_pending_with_user_role(self):
        user = register_user(email='Asha@Example.com', password='secret1', name=' Asha ')

        assert user.kyc_status == KYCStatus.PENDING
        assert user.role == UserRole.USER
        assert user.name == 'Asha'
        assert user.check_password('secret1')

    def test_duplicate_email_rejected_case_insensitively(self, user):
        with pytest.raises(UserRegistrationError, match='already exists'):
            register_user(email=user.email.upper(), password='secret1', name='Copy')

    def test_short_password_rejected(self):
        with pytest.raises(UserRegistrationError, match='at least 6'):
            register_user(email='short@example.com', password='12345', name='Short')

    @pytest.mark.parametrize('name', ['A', 'x' * 51])
    def test_name_length_enforced(self, name):
        with pytest.raises(UserRegistrationError, match='between 2 and 50'):
            register_user(email='name@example.com', password='secret1', name=name)


@pytest.mark.django_db
class TestAuthenticateUser:

    def test_valid_credentials_set_last_login(self, user):
        authenticated = authenticate_user(email=user.email, password='TestPass123!')

        assert authenticated.id == user.id
        assert authenticated.last_login is not None

    def test_wrong_password(self, user):
        with pytest.raises(InvalidCredentialsError):
            authenticate_user(email=user.email, password='wrong')

    def test_unknown_email(self, db):
        with pytest.raises(InvalidCredentialsError):
            authenticate_user(email='nobody@example.com', password='whatever')


# =============================================================================
# Roles
# =============================================================================

@pytest.mark.django_db
class TestCurrentUserRole:

    def test_anonymous_has_no_role(self):
        assert get_current_user_role(AnonymousUser()) is None
        assert get_current_user_role(None) is None

    def test_roles_are_read_from_the_user(self, user, admin_user, super_admin):
        assert get_current_user_role(user) == UserRole.USER
        assert get_current_user_role(admin_user) == UserRole.ADMIN
        assert get_current_user_role(super_admin) == UserRole.SUPER_ADMIN

    def test_admin_access(self, user, admin_user, super_admin):
        assert check_admin_access(user) is False
        assert check_admin_access(admin_user) is True
        assert check_admin_access(super_admin) is True


@pytest.mark.django_db
class TestAssignUserRole:

    def test_super_admin_promotes_user(self, super_admin, user):
        updated = assign_user_role(
            target_user_id=user.id,
            role=UserRole.ADMIN,
            assigned_by=super_admin,
        )

        assert updated.role == UserRole.ADMIN
        assert updated.role_assigned_by == str(super_admin.id)
        assert updated.role_assigned_at is not None

    def test_admin_cannot_assign_super_admin(self, admin_user, user):
        with pytest.raises(InsufficientPermissionsError, match='Only super admins'):
            assign_user_role(
                target_user_id=user.id,
                role=UserRole.SUPER_ADMIN,
                assigned_by=admin_user,
            )

    def test_plain_user_cannot_assign_roles(self, user, other_user):
        with pytest.raises(InsufficientPermissionsError):
            assign_user_role(
                target_user_id=other_user.id,
                role=UserRole.ADMIN,
                assigned_by=user,
            )

    def test_unknown_role(self, super_admin, user):
        with pytest.raises(InvalidRoleError):
            assign_user_role(target_user_id=user.id, role='owner', assigned_by=super_admin)

    def test_missing_target(self, super_admin):
        with pytest.raises(UserNotFoundError):
            assign_user_role(
                target_user_id=uuid.uuid4(),
                role=UserRole.ADMIN,
                assigned_by=super_admin,
            )

    def test_last_super_admin_cannot_be_demoted(self, super_admin):
        with pytest.raises(LastSuperAdminError):
            assign_user_role(
                target_user_id=super_admin.id,
                role=UserRole.USER,
                assigned_by=super_admin,
            )

        super_admin.refresh_from_db()
        assert super_admin.role == UserRole.SUPER_ADMIN

    def test_super_admin_demoted_when_another_remains(self, super_admin, second_super_admin):
        updated = assign_user_role(
            target_user_id=second_super_admin.id,
            role=UserRole.ADMIN,
            assigned_by=super_admin,
        )

        assert updated.role == UserRole.ADMIN

    def test_admin_cannot_demote_super_admin(self, admin_user, super_admin, second_super_admin):
        with pytest.raises(InsufficientPermissionsError, match='change the role of an admin'):
            assign_user_role(
                target_user_id=second_super_admin.id,
                role=UserRole.USER,
                assigned_by=admin_user,
            )

        second_super_admin.refresh_from_db()
        assert second_super_admin.role == UserRole.SUPER_ADMIN

    def test_admin_cannot_change_own_role(self, admin_user):
        with pytest.raises(InsufficientPermissionsError):
            assign_user_role(
                target_user_id=admin_user.id,
                role=UserRole.USER,
                assigned_by=admin_user,
            )

    def test_admin_promotes_plain_user(self, admin_user, user):
        updated = assign_user_role(
            target_user_id=user.id,
            role=UserRole.ADMIN,
            assigned_by=admin_user,
        )

        assert updated.role == UserRole.ADMIN


@pytest.mark.django_db
class TestCanRemoveAdmin:

    def test_false_for_last_super_admin(self, super_admin):
        assert can_remove_admin(
            current_user_id=super_admin.id,
            target_user_id=super_admin.id,
        ) is False

    def test_true_when_another_super_admin_remains(self, super_admin, second_super_admin):
        assert can_remove_admin(
            current_user_id=super_admin.id,
            target_user_id=second_super_admin.id,
        ) is True

    def test_true_for_plain_admin(self, super_admin, admin_user):
        assert can_remove_admin(
            current_user_id=super_admin.id,
            target_user_id=admin_user.id,
        ) is True

    def test_only_super_admins_may_remove(self, admin_user, user):
        assert can_remove_admin(
            current_user_id=admin_user.id,
            target_user_id=user.id,
        ) is False


@pytest.mark.django_db
class TestValidateAdminAction:

    def test_super_admin_may_do_anything(self, super_admin, admin_user):
        assert validate_admin_action(
            user=super_admin,
            action_type='delete_user',
            target_user_id=admin_user.id,
        ) is True

    def test_admin_limited_to_allowed_actions(self, admin_user, user):
        assert validate_admin_action(user=admin_user, action_type='approve_investment') is True
        assert validate_admin_action(
            user=admin_user,
            action_type='update_user_kyc',
            target_user_id=user.id,
        ) is True
        assert validate_admin_action(user=admin_user, action_type='delete_user') is False

    def test_admin_cannot_act_on_other_admins(self, admin_user, super_admin):
        assert validate_admin_action(
            user=admin_user,
            action_type='update_user_kyc',
            target_user_id=super_admin.id,
        ) is False

    def test_plain_user_refused(self, user):
        assert validate_admin_action(user=user, action_type='view_users') is False


@pytest.mark.django_db
class TestAdminCounts:

    def test_counts_each_role(self, user, admin_user, super_admin, second_super_admin):
        assert count_admin_users() == {'admins': 1, 'super_admins': 2}

    def test_revoke_last_super_admin_refused(self, super_admin):
        with pytest.raises(LastSuperAdminError):
            revoke_admin_access(user_id=super_admin.id)

    def test_revoke_admin(self, admin_user):
        assert revoke_admin_access(user_id=admin_user.id).role == UserRole.USER

    def test_promote_to_admin(self, user):
        assert promote_user_to_admin(user_id=user.id).role == UserRole.ADMIN
        assert count_admin_users()['admins'] == 1

    def test_promote_missing_user(self, db):
        with pytest.raises(UserNotFoundError):
            promote_user_to_admin(user_id=uuid.uuid4())


# =============================================================================
# Accounts and KYC
# =============================================================================

@pytest.mark.django_db
class TestDeleteUser:

    def test_user_is_anonymized(self, user):
        delete_user(user_id=user.id)

        user.refresh_from_db()
        assert user.is_active is False
        assert user.deleted_at is not None
        assert user.email.endswith('@anonymized.local')
        assert not user.has_usable_password()

    def test_last_super_admin_cannot_be_deleted(self, super_admin):
        with pytest.raises(LastSuperAdminError):
            delete_user(user_id=super_admin.id)

    def test_missing_user(self, db):
        with pytest.raises(UserNotFoundError):
            delete_user(user_id=uuid.uuid4())


@pytest.mark.django_db
class TestKYC:

    def test_update_status_records_notes(self, user):
        updated = update_user_kyc_status(
            user_id=user.id,
            status=KYCStatus.REJECTED,
            notes='Blurry photo',
        )

        assert updated.kyc_status == KYCStatus.REJECTED
        assert updated.kyc_notes == 'Blurry photo'
        assert updated.kyc_updated_at is not None

    def test_bulk_update(self, user, other_user):
        updated = bulk_update_kyc_status(
            user_ids=[user.id, other_user.id],
            status=KYCStatus.VERIFIED,
        )

        assert updated == 2
        assert set(
            User.objects.filter(id__in=[user.id, other_user.id])
            .values_list('kyc_status', flat=True)
        ) == {KYCStatus.VERIFIED}

    def test_bulk_update_with_unknown_id_writes_nothing(self, user):
        with pytest.raises(UserNotFoundError):
            bulk_update_kyc_status(
                user_ids=[user.id, uuid.uuid4()],
                status=KYCStatus.VERIFIED,
            )

        user.refresh_from_db()
        assert user.kyc_status == KYCStatus.PENDING

    def test_users_by_status_skips_deleted_accounts(self, user, other_user):
        delete_user(user_id=other_user.id)

        pending = get_users_by_kyc_status(status=KYCStatus.PENDING)

        assert list(pending) == [user]
        assert pending[0].investment_count == 0

    def test_users_by_unknown_status(self, db):
        with pytest.raises(InvalidKYCStatusError):
            get_users_by_kyc_status(status='approved')

    def test_cleanup_removes_only_unusable_documents(self, user):
        keep_url = add_kyc_document(
            user=user, document_type='id_proof', url='https://cdn.example.com/id.jpg'
        )
        keep_public_id = add_kyc_document(
            user=user, document_type='selfie', url='test://selfie', public_id='kyc/selfie'
        )
        add_kyc_document(user=user, document_type='address_proof', url='test://address')

        assert cleanup_invalid_kyc_documents(user_id=user.id) == 1
        assert set(
            KYCDocument.objects.filter(user=user).values_list('id', flat=True)
        ) == {keep_url.id, keep_public_id.id}

    def test_public_id_resolves_to_storage_url(self, user, settings):
        settings.CLOUDINARY_CLOUD_NAME = 'ownparks'
        document = add_kyc_document(user=user, document_type='selfie', public_id='kyc/abc')

        assert document.resolved_url() == (
            'https://res.cloudinary.com/ownparks/image/upload/kyc/abc'
        )
