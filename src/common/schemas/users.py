from common.models.users import User, UserRole


def user_to_dict(user: User) -> dict:
    return {
        "id": user.user_id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone_number,
        "isAdmin": user.role == UserRole.ADMIN,
    }
