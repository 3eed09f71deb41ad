# Generated manually for standalone django-localities package

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Locality",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "geonames_id",
                    models.BigIntegerField(blank=True, db_index=True, null=True),
                ),
                ("osm_node_id", models.BigIntegerField(blank=True, null=True)),
                ("osm_relation_id", models.BigIntegerField(blank=True, null=True)),
                (
                    "wikidata_id",
                    models.CharField(blank=True, default="", max_length=32),
                ),
                ("name", models.CharField(max_length=128)),
                ("description", models.TextField(blank=True, default="")),
                ("latitude", models.FloatField(default=0.0)),
                ("longitude", models.FloatField(default=0.0)),
                ("elevation", models.FloatField(default=0.0)),
                ("population", models.PositiveBigIntegerField(default=0)),
                (
                    "country_code",
                    models.CharField(blank=True, default="", max_length=4),
                ),
                ("time_zone", models.FloatField(default=0.0)),
                (
                    "feature_class",
                    models.CharField(
                        choices=[
                            ("A", "Country, state, region"),
                            ("H", "Stream, lake"),
                            ("L", "Park, area"),
                            ("P", "City, village"),
                            ("R", "Road, railroad"),
                            ("S", "Spot, building, farm"),
                            ("T", "Mountain, hill, rock"),
                            ("U", "Undersea"),
                            ("V", "Forest, heath"),
                            ("X", "Unknown"),
                        ],
                        default="X",
                        max_length=1,
                    ),
                ),
                (
                    "feature_code",
                    models.CharField(blank=True, default="", max_length=8),
                ),
                (
                    "osm_place_category",
                    models.CharField(
                        choices=[
                            ("continent", "Continent"),
                            ("country", "Country"),
                            ("region", "Region"),
                            ("province", "Province"),
                            ("state", "State"),
                            ("county", "County"),
                            ("district", "District"),
                            ("archipelago", "Archipelago"),
                            ("island", "Island"),
                            ("city", "City"),
                            ("town", "Town"),
                            ("village", "Village"),
                            ("municipality", "Municipality"),
                            ("populated_place", "Populated Place"),
                            ("administrative", "Administrative Entity"),
                            ("political", "Political Entity"),
                            ("other", "Other"),
                            ("unknown", "Unknown"),
                        ],
                        default="unknown",
                        max_length=32,
                    ),
                ),
                (
                    "bounding_box",
                    models.CharField(blank=True, default="", max_length=128),
                ),
                ("polygon", models.BinaryField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name_plural": "localities",
                "ordering": ["name"],
            },
        ),
    ]
