import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('directory', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Announcement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=300)),
                ('summary', models.TextField()),
                ('full_content', models.TextField()),
                ('attachments', models.JSONField(blank=True, default=list)),
                ('industry_tags', models.JSONField(blank=True, default=list)),
                ('journalist_beat_tags', models.JSONField(blank=True, default=list)),
                ('target_outlets', models.JSONField(blank=True, default=list)),
                ('embargo_at', models.DateTimeField(db_index=True)),
                ('plan', models.CharField(choices=[('Basic', 'Basic'), ('Premium', 'Premium')], max_length=20)),
                ('fee', models.DecimalField(decimal_places=2, max_digits=12)),
                ('status', models.CharField(choices=[('awaiting_claim', 'Awaiting claim'), ('claimed', 'Claimed'), ('published', 'Published'), ('archived', 'Archived')], db_index=True, default='awaiting_claim', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('claimant', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='claimed_announcements', to='directory.member')),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='announcements', to='directory.member')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(('claimant__isnull', True), ('status__in', ['awaiting_claim', 'archived'])),
                            models.Q(('claimant__isnull', False), ('status__in', ['claimed', 'published'])),
                            _connector='OR',
                        ),
                        name='announcement_claimant_matches_status',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Claim',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('claimed_at', models.DateTimeField()),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('published', 'Published')], default='pending', max_length=20)),
                ('published_url', models.URLField(blank=True, default='', max_length=500)),
                ('announcement', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='claim', to='exclusives.announcement')),
                ('journalist', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='claims', to='directory.member')),
            ],
            options={
                'ordering': ['-claimed_at'],
            },
        ),
        migrations.CreateModel(
            name='ChatThread',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField()),
                ('announcement', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='chat', to='exclusives.announcement')),
            ],
        ),
        migrations.CreateModel(
            name='ChatMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('text', models.TextField()),
                ('sent_at', models.DateTimeField()),
                ('sender', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='chat_messages', to='directory.member')),
                ('thread', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='messages', to='exclusives.chatthread')),
            ],
            options={
                'ordering': ['sent_at', 'id'],
            },
        ),
    ]
