import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('users', '0002_user_review_counts'),
    ]

    operations = [
        migrations.CreateModel(
            name='Review',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rating', models.CharField(choices=[('positive', 'Positive'), ('neutral', 'Neutral'), ('negative', 'Negative')], max_length=10)),
                ('review', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('reviewee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reviews_received', to='users.user')),
                ('reviewer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reviews_written', to='users.user')),
            ],
            options={
                'db_table': 'reviews',
                'indexes': [models.Index(fields=['reviewee', 'created_at'], name='idx_review_reviewee_created')],
                'constraints': [
                    models.UniqueConstraint(fields=('reviewer', 'reviewee'), name='unique_review_per_pair'),
                    models.CheckConstraint(condition=models.Q(('reviewer', models.F('reviewee')), _negated=True), name='review_distinct_users'),
                ],
            },
        ),
    ]
