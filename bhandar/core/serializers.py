from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User, AuditLog


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'role',
                  'is_active', 'is_staff', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class SignupSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, validators=[validate_password])
    name = serializers.CharField(required=False, allow_blank=True, default='')
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)
    employee_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('A user with this email already exists')
        return value.lower()

    def validate(self, attrs):
        if attrs['role'] == User.ROLE_EMPLOYEE and not attrs.get('employee_id'):
            raise serializers.ValidationError({'employee_id': 'Employee ID is required for employee accounts'})
        # Only the first cluster head may sign themselves up
        if attrs['role'] == User.ROLE_CLUSTER_HEAD and User.objects.filter(role=User.ROLE_CLUSTER_HEAD).exists():
            raise serializers.ValidationError({'role': 'A cluster head already exists'})
        return attrs

    def create(self, validated_data):
        first_name, _, last_name = validated_data.get('name', '').partition(' ')
        user = User(
            username=validated_data['email'],
            email=validated_data['email'],
            first_name=first_name,
            last_name=last_name,
            role=validated_data['role'],
            is_active=True,
        )
        user.set_password(validated_data['password'])
        user.save()
        return user


class FixRoleSerializer(serializers.Serializer):
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)


class BhandarTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Token pair serializer accepting an email in place of the username"""

    def validate(self, attrs):
        login = attrs.get(self.username_field, '')
        if '@' in login:
            user = User.objects.filter(email__iexact=login).first()
            if user:
                attrs[self.username_field] = user.username
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        employee = getattr(user, 'employee_profile', None)
        token['employee_id'] = employee.employee_id if employee else None
        return token


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']
