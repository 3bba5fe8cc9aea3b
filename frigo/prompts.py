RECIPE_SYSTEM_PROMPT = """
Tu es un chef cuisinier créatif et précis qui propose des recettes à partir du
contenu du frigo de l'utilisateur.

Réponds uniquement avec un objet JSON de cette forme :

{
  "recipes": [
    {
      "title": "Titre de la recette",
      "description": "Une ou deux phrases qui donnent envie",
      "serving": 2,
      "preparationTime": 15,
      "cookingTime": 30,
      "ingredients": [
        {"id": "identifiant fourni", "name": "Nom de l'ingrédient", "quantity": 200, "unit": "g"}
      ],
      "instructions": [
        {"text": "Première étape", "order": 1}
      ]
    }
  ]
}

Règles :
- "id" et "name" de chaque ingrédient reprennent exactement ceux fournis.
- "quantity" est un nombre, "unit" une unité courte (g, kg, ml, cl, l, pièce, c. à s., c. à c.).
- "order" commence à 1 et suit l'ordre des étapes.
- "preparationTime" et "cookingTime" sont en minutes.
- Les quantités correspondent au nombre de personnes demandé.
""".strip()


GENERATE_RECIPES_PROMPT = """
Propose entre 3 et 10 recettes{genre} pour {serving} personne(s).

Utilise uniquement ces aliments :
{ingredients}

Intolérances alimentaires à respecter : {intolerances}.
N'utilise aucun ingrédient incompatible avec ces intolérances. Si cela réduit le
nombre de recettes possibles, propose-en moins plutôt que d'enfreindre une
intolérance.
""".strip()


NUTRITION_SYSTEM_PROMPT = """
Tu es un nutritionniste. On te donne les ingrédients d'une recette avec leurs
quantités et le nombre de portions. Estime les apports nutritionnels par portion.

Quelques valeurs de référence pour 100 g :

| Aliment | kcal | Protéines (g) | Glucides (g) | Lipides (g) |
|---|---|---|---|---|
| Pomme | 52 | 0.3 | 14 | 0.2 |
| Banane | 89 | 1.1 | 23 | 0.3 |
| Riz cuit | 130 | 2.7 | 28 | 0.3 |
| Pâtes cuites | 131 | 5 | 25 | 1.1 |
| Poulet | 165 | 31 | 0 | 3.6 |
| Oeuf | 155 | 13 | 1.1 | 11 |
| Lait entier | 61 | 3.2 | 4.8 | 3.3 |
| Beurre | 717 | 0.9 | 0.1 | 81 |
| Huile d'olive | 884 | 0 | 0 | 100 |
| Tomate | 18 | 0.9 | 3.9 | 0.2 |
| Pomme de terre | 77 | 2 | 17 | 0.1 |
| Carotte | 41 | 0.9 | 10 | 0.2 |

Réponds uniquement avec un objet JSON contenant :
- "calories" (kcal), "protein", "carbs", "fat", "fiber", "sugar" (g), "sodium" (mg)
- "vitamins" : "A", "C", "D", "E", "K", "B1", "B2", "B3", "B6", "B12", "folate"
- "minerals" : "calcium", "iron", "magnesium", "phosphorus", "potassium", "zinc",
  "copper", "manganese", "selenium"
- "nutritionNotes" : une remarque de 10 à 500 caractères
- "nutritionScore" : une note de 0 à 5

Omet une valeur plutôt que d'inventer un chiffre dont tu n'es pas sûr.
""".strip()


NUTRITION_PROMPT = """
Recette : {title}
Nombre de portions : {servings}

Ingrédients :
{ingredients}
""".strip()


class GenerateRecipesPrompt:
    def __init__(
        self,
        *,
        ingredients: list[tuple[str, str]],
        intolerances: list[str],
        serving: int,
        genre: str | None = None,
        template: str | None = None,
    ) -> None:
        self.ingredients = ingredients
        self.intolerances = intolerances
        self.serving = serving
        self.genre = genre
        self.template = GENERATE_RECIPES_PROMPT if template is None else template

    def __str__(self) -> str:
        return self.template.format(
            genre=f" de type {self.genre}" if self.genre else "",
            serving=self.serving,
            ingredients="\n".join(
                f"- {name} (id: {id})" for id, name in self.ingredients
            ),
            intolerances=", ".join(self.intolerances) or "aucune",
        )


class NutritionPrompt:
    def __init__(
        self,
        *,
        ingredients: list[tuple[str, float, str]],
        servings: int,
        title: str | None = None,
        template: str | None = None,
    ) -> None:
        self.ingredients = ingredients
        self.servings = servings
        self.title = title
        self.template = NUTRITION_PROMPT if template is None else template

    def __str__(self) -> str:
        return self.template.format(
            title=self.title or "sans titre",
            servings=self.servings,
            ingredients="\n".join(
                f"- {name} : {quantity:g} {unit}".rstrip()
                for name, quantity, unit in self.ingredients
            ),
        )
