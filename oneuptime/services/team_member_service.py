from oneuptime.models.entities import UserEntity
from oneuptime.repositories.team_member_repository import TeamMemberRepository


class TeamMemberService:
    def __init__(self, team_member_repository: TeamMemberRepository) -> None:
        self.team_member_repository = team_member_repository

    def get_users_in_teams(self, team_ids: list[int]) -> list[UserEntity]:
        return self.team_member_repository.list_users_in_teams(list(dict.fromkeys(team_ids)))
