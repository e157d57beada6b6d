from django.conf import settings
from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import mixins, serializers, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from apps.investments.serializers import InvestmentSerializer
from apps.investments.services import get_user_investment_history
from apps.notifications.service import get_notification_center
from .models import KYCStatus
from .permissions import IsAdminRole
from .serializers import (
    AssignRoleSerializer,
    BulkKYCStatusUpdateSerializer,
    KYCDocumentCreateSerializer,
    KYCDocumentSerializer,
    KYCStatusFilterSerializer,
    KYCStatusUpdateSerializer,
    ProfileUpdateSerializer,
    UserAdminSerializer,
    UserLoginSerializer,
    UserRegistrationSerializer,
    UserSerializer,
)
from .services import (
    add_kyc_document,
    assign_user_role,
    authenticate_user,
    bulk_update_kyc_status,
    can_remove_admin,
    check_admin_access,
    cleanup_invalid_kyc_documents,
    count_admin_users,
    delete_user,
    get_admin_users,
    get_all_users,
    get_current_user_role,
    get_kyc_documents_for_user,
    get_user_by_id,
    get_users_by_kyc_status,
    register_user,
    update_user_kyc_status,
    update_user_profile,
    validate_admin_action,
    # Exceptions
    InactiveAccountError,
    InsufficientPermissionsError,
    InvalidCredentialsError,
    InvalidRoleError,
    LastSuperAdminError,
    UserNotFoundError,
    UserRegistrationError,
)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokensResponseSerializer()


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


def _token_response(user, message, status_code=status.HTTP_200_OK):
    refresh = RefreshToken.for_user(user)
    return Response({
        'message': message,
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }
    }, status=status_code)


@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Register a new investor account and receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new user account."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    data = serializer.validated_data.copy()
    data.pop('password_confirm', None)

    try:
        user = register_user(**data)
    except UserRegistrationError as e:
        return Response(
            {'error': str(e)},
            status=status.HTTP_400_BAD_REQUEST
        )

    return _token_response(user, 'Registration successful', status.HTTP_201_CREATED)


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with email and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = UserLoginSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        user = authenticate_user(
            email=serializer.validated_data['email'],
            password=serializer.validated_data['password'],
        )
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return _token_response(user, 'Login successful')


@extend_schema(
    request=None,
    responses={200: MessageResponseSerializer},
    description="Logout. Nothing is revoked on the server; tokens expire on their own and the client discards them.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """Logout the current user."""
    return Response({'message': 'Logout successful'})


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current authenticated user's profile.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user profile."""
    return Response(UserSerializer(request.user).data)


@extend_schema(
    request=ProfileUpdateSerializer,
    responses={
        200: UserSerializer,
        400: ErrorResponseSerializer,
    },
    description="Update the current user's profile (name, phone).",
    tags=['auth'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    """Update user profile."""
    serializer = ProfileUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = update_user_profile(user=request.user, **serializer.validated_data)
    return Response(UserSerializer(user).data)


@extend_schema(
    responses={200: inline_serializer(
        name='CurrentRoleResponse',
        fields={
            'role': serializers.CharField(allow_null=True),
            'is_admin': serializers.BooleanField(),
        },
    )},
    description="Role of the caller. Role is null for anonymous requests.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def current_role(request):
    """Return the caller's role."""
    return Response({
        'role': get_current_user_role(request.user),
        'is_admin': check_admin_access(request.user),
    })


@extend_schema(
    responses={200: inline_serializer(
        name='LeaseAgreementResponse',
        fields={'url': serializers.URLField()},
    )},
    description="Location of the lease agreement investors must accept.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def lease_agreement(request):
    """Return the external lease agreement URL."""
    return Response({'url': settings.LEASE_AGREEMENT_URL})


@extend_schema(
    request=KYCDocumentCreateSerializer,
    responses={
        200: KYCDocumentSerializer(many=True),
        201: KYCDocumentSerializer,
        400: ErrorResponseSerializer,
    },
    description="List or register the current user's KYC documents.",
    tags=['auth'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def my_documents(request):
    """List or add the current user's KYC documents."""
    if request.method == 'GET':
        documents = get_kyc_documents_for_user(user_id=request.user.id)
        return Response(KYCDocumentSerializer(documents, many=True).data)

    serializer = KYCDocumentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    document = add_kyc_document(user=request.user, **serializer.validated_data)
    return Response(KYCDocumentSerializer(document).data, status=status.HTTP_201_CREATED)


# =============================================================================
# Admin user management
# =============================================================================

class UserPagination(PageNumberPagination):
    """Custom pagination for user lists."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


class UserAdminViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for admin user management.

    Views are thin HTTP handlers; rules live in services.

    list: All users (filter with ?kyc_status=)
    retrieve: One user
    destroy: Delete (anonymize) a user
    """

    serializer_class = UserAdminSerializer
    permission_classes = [IsAuthenticated, IsAdminRole]
    pagination_class = UserPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        filter_serializer = KYCStatusFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        kyc_status = filter_serializer.validated_data.get('kyc_status')
        if kyc_status:
            return get_users_by_kyc_status(status=kyc_status)
        return get_all_users()

    def _forbidden_unless_allowed(self, action_type, target_user_id=None):
        if validate_admin_action(
            user=self.request.user,
            action_type=action_type,
            target_user_id=target_user_id
        ):
            return None
        return Response(
            {'error': 'You are not allowed to perform this action'},
            status=status.HTTP_403_FORBIDDEN
        )

    def destroy(self, request, *args, **kwargs):
        """Delete a user account."""
        denied = self._forbidden_unless_allowed('delete_user', self.kwargs['pk'])
        if denied:
            return denied

        try:
            delete_user(user_id=self.kwargs['pk'])
        except UserNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LastSuperAdminError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=KYCStatusUpdateSerializer, responses={200: UserAdminSerializer})
    @action(detail=True, methods=['post'])
    def kyc(self, request, pk=None):
        """Record a KYC review decision and notify the user."""
        denied = self._forbidden_unless_allowed('update_user_kyc', pk)
        if denied:
            return denied

        serializer = KYCStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        kyc_status = serializer.validated_data['status']
        notes = serializer.validated_data.get('notes', '')

        try:
            user = update_user_kyc_status(user_id=pk, status=kyc_status, notes=notes)
        except UserNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        notifications = get_notification_center().for_user(user.id)
        if kyc_status == KYCStatus.VERIFIED:
            notifications.create_kyc_approval_notification(user.get_display_name())
        elif kyc_status == KYCStatus.REJECTED:
            notifications.create_kyc_rejection_notification(
                user.get_display_name(),
                notes or 'Documents could not be verified'
            )

        return Response(UserAdminSerializer(user).data)

    @extend_schema(
        request=BulkKYCStatusUpdateSerializer,
        responses={200: inline_serializer(
            name='BulkKYCResponse',
            fields={'updated': serializers.IntegerField()},
        )},
    )
    @action(detail=False, methods=['post'], url_path='bulk-kyc')
    def bulk_kyc(self, request):
        """Apply one KYC decision to many users."""
        denied = self._forbidden_unless_allowed('update_user_kyc')
        if denied:
            return denied

        serializer = BulkKYCStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            updated = bulk_update_kyc_status(
                user_ids=serializer.validated_data['user_ids'],
                status=serializer.validated_data['status'],
                notes=serializer.validated_data.get('notes', ''),
            )
        except UserNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response({'updated': updated})

    @extend_schema(request=AssignRoleSerializer, responses={200: UserAdminSerializer})
    @action(detail=True, methods=['post'])
    def role(self, request, pk=None):
        """Assign a role to the user."""
        serializer = AssignRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user = assign_user_role(
                target_user_id=pk,
                role=serializer.validated_data['role'],
                assigned_by=request.user,
            )
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except UserNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LastSuperAdminError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except InvalidRoleError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(UserAdminSerializer(user).data)

    @extend_schema(responses={200: inline_serializer(
        name='CanRemoveAdminResponse',
        fields={'can_remove': serializers.BooleanField()},
    )})
    @action(detail=True, methods=['get'], url_path='can-remove-admin')
    def can_remove(self, request, pk=None):
        """Whether the caller may demote this user."""
        return Response({
            'can_remove': can_remove_admin(
                current_user_id=request.user.id,
                target_user_id=pk,
            )
        })

    @extend_schema(responses={200: KYCDocumentSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def documents(self, request, pk=None):
        """KYC documents of the user."""
        try:
            documents = get_kyc_documents_for_user(user_id=pk)
        except UserNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(KYCDocumentSerializer(documents, many=True).data)

    @extend_schema(responses={200: InvestmentSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def investments(self, request, pk=None):
        """Every investment of the user regardless of status."""
        denied = self._forbidden_unless_allowed('view_investments')
        if denied:
            return denied

        try:
            user = get_user_by_id(user_id=pk)
        except UserNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        investments = get_user_investment_history(user_id=user.id)
        return Response(InvestmentSerializer(investments, many=True).data)

    @extend_schema(
        request=None,
        responses={200: inline_serializer(
            name='CleanupDocumentsResponse',
            fields={'deleted': serializers.IntegerField()},
        )},
    )
    @action(detail=True, methods=['post'], url_path='cleanup-documents')
    def cleanup_documents(self, request, pk=None):
        """Delete the user's documents that have no usable URL."""
        deleted = cleanup_invalid_kyc_documents(user_id=pk)
        return Response({'deleted': deleted})

    @action(detail=False, methods=['get'])
    def admins(self, request):
        """Users holding an admin role."""
        serializer = UserAdminSerializer(get_admin_users(), many=True)
        return Response(serializer.data)

    @extend_schema(responses={200: inline_serializer(
        name='AdminCountsResponse',
        fields={
            'admins': serializers.IntegerField(),
            'super_admins': serializers.IntegerField(),
        },
    )})
    @action(detail=False, methods=['get'], url_path='admin-counts')
    def admin_counts(self, request):
        """Number of admins and super admins."""
        return Response(count_admin_users())
