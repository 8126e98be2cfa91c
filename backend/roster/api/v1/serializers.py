from rest_framework import serializers

from roster.domain.models import (
    Availability,
    FinalizedRoster,
    Member,
    RosterAssignment,
    RosterSettings,
    ServiceRole,
    SpecialDay,
    Verse,
)

class MemberPublicSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source="first_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)

    class Meta:
        model = Member
        fields = ["id", "firstName", "lastName", "initials"]
        read_only_fields = ("id", "initials")

class MemberSerializer(MemberPublicSerializer):
    isAdmin = serializers.BooleanField(source="is_admin", read_only=True)
    firstLogin = serializers.BooleanField(source="first_login", read_only=True)

    class Meta(MemberPublicSerializer.Meta):
        fields = ["id", "firstName", "lastName", "initials", "email", "isAdmin", "firstLogin"]
        read_only_fields = ("id", "initials", "email")

class ServiceRoleSerializer(serializers.ModelSerializer):
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    maxOccupants = serializers.IntegerField(source="max_occupants", read_only=True, allow_null=True)

    class Meta:
        model = ServiceRole
        fields = ["id", "name", "description", "isActive", "order", "maxOccupants"]
        read_only_fields = ("id", "name", "description", "order")

class RosterAssignmentSerializer(serializers.ModelSerializer):
    serviceDate = serializers.DateField(source="service_date", read_only=True)
    roleId = serializers.IntegerField(source="role_id", read_only=True)
    roleName = serializers.CharField(source="role.name", read_only=True)
    userId = serializers.IntegerField(source="member_id", read_only=True)
    member = MemberPublicSerializer(read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = RosterAssignment
        fields = ["id", "serviceDate", "roleId", "roleName", "userId", "member", "notes", "createdAt"]
        read_only_fields = ("id", "notes")

class SpecialDaySerializer(serializers.ModelSerializer):
    class Meta:
        model = SpecialDay
        fields = ["id", "date", "name", "description", "color"]
        read_only_fields = ("id", "date", "name", "description", "color")

class FinalizedRosterSerializer(serializers.ModelSerializer):
    isFinalized = serializers.BooleanField(source="is_finalized", read_only=True)
    finalizedAt = serializers.DateTimeField(source="finalized_at", read_only=True)
    finalizedBy = serializers.SerializerMethodField()

    class Meta:
        model = FinalizedRoster
        fields = ["year", "month", "isFinalized", "message", "finalizedAt", "finalizedBy"]
        read_only_fields = ("year", "month", "message")

    def get_finalizedBy(self, obj):
        return obj.finalized_by.username if obj.finalized_by_id else None

class AvailabilitySerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source="member_id", read_only=True)
    serviceDate = serializers.DateField(source="service_date", read_only=True)
    isAvailable = serializers.BooleanField(source="is_available", read_only=True)
    lastUpdated = serializers.DateTimeField(source="last_updated", read_only=True)

    class Meta:
        model = Availability
        fields = ["id", "userId", "serviceDate", "isAvailable", "lastUpdated"]
        read_only_fields = ("id",)

class RosterSettingsSerializer(serializers.ModelSerializer):
    deadlineDay = serializers.IntegerField(source="deadline_day", read_only=True)
    nameFormat = serializers.CharField(source="name_format", read_only=True)

    class Meta:
        model = RosterSettings
        fields = ["deadlineDay", "nameFormat"]

class VerseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Verse
        fields = ["id", "text", "reference", "category"]
        read_only_fields = ("id", "text", "reference", "category")

def available_person(member: Member, name_format: str) -> dict:
    data = MemberPublicSerializer(member).data
    data["formattedName"] = member.formatted_name(name_format)
    return data

def sunday_roster(entry) -> dict:
    """Serializes one Sunday of the roster builder."""
    return {
        "date": entry.date.isoformat(),
        "availablePeople": [available_person(m, entry.name_format) for m in entry.available_people],
        "assignments": RosterAssignmentSerializer(entry.assignments, many=True).data,
        "specialDay": SpecialDaySerializer(entry.special_day).data if entry.special_day else None,
        "roles": ServiceRoleSerializer(entry.roles, many=True).data,
    }

def staged_result(result) -> dict:
    return {
        "roleId": result.role_id,
        "userId": result.member_id,
        "status": result.status,
        "code": result.code,
        "message": result.message,
        "assignmentId": result.assignment_id,
    }
