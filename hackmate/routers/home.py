from fastapi import APIRouter
from pydantic import BaseModel


router = APIRouter(tags=["home"])


class NavLink(BaseModel):
    label: str
    path: str


class Feature(BaseModel):
    title: str
    description: str


class HomeContent(BaseModel):
    headline: str
    tagline: str
    features: list[Feature]
    links: list[NavLink]


NAV_LINKS = [
    NavLink(label="Home", path="/"),
    NavLink(label="Find Teammates", path="/browse"),
    NavLink(label="Profile", path="/profile"),
]

FEATURES = [
    Feature(
        title="Create Your Profile",
        description="Showcase your skills, experience, and the technologies you love working with.",
    ),
    Feature(
        title="Find Teammates",
        description="Search for potential teammates based on skills, location, and hackathon interests.",
    ),
    Feature(
        title="Join Hackathons",
        description="Browse upcoming hackathons and connect with others who are interested in participating.",
    ),
]


@router.get("/", response_model=HomeContent, summary="Landing page content")
def home() -> HomeContent:
    return HomeContent(
        headline="Find Your Perfect Hackathon Team",
        tagline="Connect with talented developers, designers, and creators for your next hackathon project.",
        features=FEATURES,
        links=NAV_LINKS,
    )
