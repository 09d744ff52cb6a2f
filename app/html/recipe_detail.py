from jinja2 import Environment

from catalog.models import Recipe, RecipeRow


class RecipeDetail:
    def __init__(
        self,
        recipe: Recipe,
        *,
        environment: Environment,
        template_name: str = "recipe-detail.html",
    ) -> None:
        self.recipe = recipe
        self.env = environment
        self.name = template_name

    @property
    def title(self) -> str:
        return self.recipe.name

    @property
    def cuisine(self) -> str:
        return self.recipe.cuisine

    @property
    def photo(self) -> str | None:
        if self.recipe.photo_large is not None or self.recipe.photo_url_large:
            return f"/recipes/{self.recipe.id}/photo/large"
        return None

    @property
    def source_url(self) -> str:
        return self.recipe.source_url

    @property
    def video_url(self) -> str:
        return self.recipe.youtube_url

    def render(self) -> str:
        return self.env.get_template(self.name).render(recipe=self)


class RecipeList:
    def __init__(
        self,
        recipes: list[Recipe],
        *,
        environment: Environment,
        query: str = "",
        error_message: str | None = None,
        is_refreshing: bool = False,
        template_name: str = "index.html",
    ) -> None:
        self.rows = [RecipeRow.from_recipe(r) for r in recipes]
        self.env = environment
        self.query = query
        self.error_message = error_message
        self.is_refreshing = is_refreshing
        self.name = template_name

    def render(self) -> str:
        return self.env.get_template(self.name).render(page=self)
