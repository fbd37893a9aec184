import django.db.models.deletion
import django.db.models.functions.comparison
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('listings', '0001_initial'),
        ('users', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Conversation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('last_message_content', models.TextField(blank=True, null=True)),
                ('last_message_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('listing', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='conversations', to='listings.listing')),
                ('user1', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='+', to='users.user')),
                ('user2', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='+', to='users.user')),
            ],
            options={
                'db_table': 'conversations',
                'indexes': [
                    models.Index(fields=['user1'], name='idx_conv_user1'),
                    models.Index(fields=['user2'], name='idx_conv_user2'),
                ],
                'constraints': [
                    models.UniqueConstraint(
                        django.db.models.functions.comparison.Least(models.F('user1'), models.F('user2')),
                        django.db.models.functions.comparison.Greatest(models.F('user1'), models.F('user2')),
                        models.F('listing'),
                        condition=models.Q(('listing__isnull', False)),
                        name='unique_conversation_per_listing',
                    ),
                    models.UniqueConstraint(
                        django.db.models.functions.comparison.Least(models.F('user1'), models.F('user2')),
                        django.db.models.functions.comparison.Greatest(models.F('user1'), models.F('user2')),
                        condition=models.Q(('listing__isnull', True)),
                        name='unique_conversation_without_listing',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('user1', models.F('user2')), _negated=True),
                        name='conversation_distinct_users',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Message',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('content', models.TextField()),
                ('is_read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('conversation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='messages', to='conversations.conversation')),
                ('receiver', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='received_messages', to='users.user')),
                ('sender', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sent_messages', to='users.user')),
            ],
            options={
                'db_table': 'messages',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['conversation', 'created_at'], name='idx_msg_conv_created'),
                    models.Index(fields=['receiver', 'is_read'], name='idx_msg_receiver_unread'),
                ],
            },
        ),
    ]
