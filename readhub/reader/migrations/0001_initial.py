import django.core.validators
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Article',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=500)),
                ('content', models.TextField(blank=True, default='')),
                ('author', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('source', models.CharField(max_length=255)),
                ('url', models.URLField(max_length=1000)),
                ('url_to_image', models.URLField(blank=True, max_length=1000, null=True)),
                ('published_at', models.DateTimeField()),
                ('category', models.CharField(max_length=100)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('is_favorite', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'ordering': ['-published_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Magazine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('publisher', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('cover_image', models.URLField(blank=True, max_length=1000, null=True)),
                ('issue_number', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('publication_date', models.DateTimeField()),
                ('article_ids', models.JSONField(blank=True, default=list)),
                ('category', models.CharField(max_length=100)),
                ('is_favorite', models.BooleanField(default=False)),
            ],
            options={
                'ordering': ['-publication_date', 'id'],
            },
        ),
    ]
