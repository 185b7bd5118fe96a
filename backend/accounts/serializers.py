from rest_framework import serializers
from django.contrib.auth import get_user_model

from .models import Profile

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=6)
    display_name = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = User
        fields = (
            "id",
            "user_uid",
            "username",
            "email",
            "password",
            "display_name",
        )
        extra_kwargs = {
            "email": {"required": True},
        }

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("This email is already registered.")
        return value.lower()

    def validate_username(self, value):
        if Profile.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError("This username is taken.")
        return value

    def create(self, validated_data):
        display_name = validated_data.pop("display_name", "")
        password = validated_data.pop("password")

        user = User(**validated_data)
        user.first_name = display_name
        user.set_password(password)
        user.save()
        return user


class ProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source="user.id", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    win_rate = serializers.IntegerField(read_only=True)
    vip_label = serializers.CharField(read_only=True)

    class Meta:
        model = Profile
        fields = (
            "user_id",
            "email",
            "username",
            "display_name",
            "avatar_url",
            "points_balance",
            "total_games_played",
            "total_games_won",
            "win_rate",
            "vip_level",
            "vip_label",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Edit form: balance and stats are not writable here."""

    class Meta:
        model = Profile
        fields = ("username", "display_name", "avatar_url")
        extra_kwargs = {
            "username": {"required": False},
            "display_name": {"required": False, "allow_blank": True},
            "avatar_url": {"required": False, "allow_blank": True},
        }

    def validate_username(self, value):
        qs = Profile.objects.filter(username__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("This username is taken.")
        return value

    def update(self, instance, validated_data):
        # never write back points_balance / counters from a possibly stale instance
        for name, value in validated_data.items():
            setattr(instance, name, value)
        instance.save(update_fields=[*validated_data.keys(), "updated_at"])
        return instance


class LeaderboardEntrySerializer(serializers.ModelSerializer):
    win_rate = serializers.IntegerField(read_only=True)

    class Meta:
        model = Profile
        fields = (
            "username",
            "display_name",
            "vip_level",
            "total_games_won",
            "total_games_played",
            "win_rate",
            "points_balance",
        )
