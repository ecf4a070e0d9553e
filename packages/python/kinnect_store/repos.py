from .courses_repo import SupabaseCourseRepo
from .groups_repo import SupabaseGroupRepo
from .mentors_repo import SupabaseMentorRepo
from .posts_repo import SupabasePostRepo
from .protocols import StoreRepos
from .users_repo import SupabaseUserRepo


def supabase_repos(client) -> StoreRepos:
    """All read repositories over one (sync) supabase-py client."""
    return StoreRepos(
        users=SupabaseUserRepo(client),
        posts=SupabasePostRepo(client),
        groups=SupabaseGroupRepo(client),
        mentors=SupabaseMentorRepo(client),
        courses=SupabaseCourseRepo(client),
    )
